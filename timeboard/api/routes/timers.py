"""Running timer and manual time entry endpoints.

Every mutation is idempotent when the caller sends a token header: the
first result, success or failure, is stored and replayed verbatim
for retries. The long-running guard runs before any work on a member.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from timeboard.api.dependencies import (
    IdempotencyGuardDep,
    IdempotencyTokenDep,
    SettingsDep,
    TeamRosterDep,
    TimerGuardDep,
    TimerServiceDep,
)
from timeboard.api.exceptions import from_timer_error
from timeboard.api.models.errors import ErrorBody, ErrorCode, ErrorResponse
from timeboard.api.models.timers import (
    DeleteEntryRequest,
    StartTimerRequest,
    StopTimerRequest,
    UpdateCurrentRequest,
    UpdateEntryRequest,
)
from timeboard.api.routes.params import require_member
from timeboard.config.models.resilience import IdempotencyConfig
from timeboard.idempotency.guard import IdempotencyGuard
from timeboard.observability.logging import get_logger
from timeboard.timers.errors import TimerError
from timeboard.timers.models import TimerEntry
from timeboard.utils.clock import utc_now
from timeboard.utils.dates import to_rfc3339

logger = get_logger(__name__)

router = APIRouter(prefix="/time-entries")

SCOPE_PATCH_CURRENT = "time-entries-current-patch"
SCOPE_START = "time-entries-start"
SCOPE_STOP = "time-entries-stop"
SCOPE_UPDATE = "time-entries-update"
SCOPE_DELETE = "time-entries-delete"


def _entry(entry: TimerEntry | None) -> dict[str, Any] | None:
    if entry is None:
        return None
    return entry.model_dump(mode="json", by_alias=True)


def _mutation_body(member: str, warning: str | None, **fields: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"ok": True, "member": member, **fields, "cachedAt": to_rfc3339(utc_now())}
    if warning:
        body["warning"] = warning
    return body


async def _run_idempotent(
    *,
    scope: str,
    subject_id: str,
    token: str | None,
    guard: IdempotencyGuard,
    ttls: IdempotencyConfig,
    operation: Callable[[], Awaitable[dict[str, Any]]],
) -> JSONResponse:
    """Replay a stored result or run the operation once and store its result.

    Rule violations and unexpected failures are stored with the shorter
    error TTL and replayed like successes.
    """
    replay = await guard.read_replay(scope, subject_id, token)
    if replay is not None:
        return JSONResponse(status_code=replay.status, content=replay.body)

    try:
        content = await operation()
        status = 200
        ttl = ttls.success_ttl_seconds
    except TimerError as e:
        api_error = from_timer_error(e)
        content = api_error.to_content()
        status = api_error.status_code
        ttl = ttls.error_ttl_seconds
        logger.info(
            "timer_mutation_rejected",
            scope=scope,
            error_type=type(e).__name__,
            message=e.message,
        )
    except Exception as e:
        content = ErrorResponse(
            error=ErrorBody(code=ErrorCode.INTERNAL_ERROR, message="An unexpected error occurred")
        ).to_content()
        status = 500
        ttl = ttls.error_ttl_seconds
        logger.exception(
            "timer_mutation_failed",
            scope=scope,
            error=str(e),
            error_type=type(e).__name__,
        )

    await guard.write_result(scope, subject_id, token, status, content, ttl)
    return JSONResponse(status_code=status, content=content)


@router.get("/current")
async def get_current_entry(
    roster: TeamRosterDep,
    timer_guard: TimerGuardDep,
    timers: TimerServiceDep,
    member: str | None = Query(default=None),
    tz_offset: str | None = Query(default=None, alias="tzOffset"),
) -> dict[str, Any]:
    """Get a member's running entry after auto-stopping over-long timers."""
    resolved = require_member(roster, member)
    report = await timer_guard.enforce([resolved.name], tz_offset)
    running = await timers.running(resolved.name)
    return {
        "member": resolved.name,
        "current": _entry(running),
        "cachedAt": to_rfc3339(utc_now()),
        "warning": report.warning,
    }


@router.patch("/current")
async def update_current_entry(
    request: UpdateCurrentRequest,
    settings: SettingsDep,
    roster: TeamRosterDep,
    idempotency: IdempotencyGuardDep,
    token: IdempotencyTokenDep,
    timer_guard: TimerGuardDep,
    timers: TimerServiceDep,
) -> JSONResponse:
    """Edit the running entry, or backdate it when ``elapsedSeconds`` is given.

    Args:
        request: Update body
        settings: Application settings
        roster: Team roster
        idempotency: Idempotency guard
        token: Idempotency token, if sent
        timer_guard: Long-running timer guard
        timers: Timer service

    Returns:
        The updated running entry, or the replayed earlier result
    """
    resolved = require_member(roster, request.member)

    async def operation() -> dict[str, Any]:
        report = await timer_guard.enforce([resolved.name], request.tz_offset)
        elapsed = request.elapsed_seconds
        if elapsed is not None and elapsed >= 0:
            updated = await timers.backdate(
                resolved.name,
                int(elapsed),
                description=request.description,
                project=request.project,
                tz_offset=request.tz_offset,
            )
        else:
            updated = await timers.update_running(
                resolved.name,
                description=request.description,
                project=request.project,
            )
        return _mutation_body(resolved.name, report.warning, current=_entry(updated))

    return await _run_idempotent(
        scope=SCOPE_PATCH_CURRENT,
        subject_id=resolved.name,
        token=token,
        guard=idempotency,
        ttls=settings.idempotency,
        operation=operation,
    )


@router.post("/start")
async def start_timer(
    request: StartTimerRequest,
    settings: SettingsDep,
    roster: TeamRosterDep,
    idempotency: IdempotencyGuardDep,
    token: IdempotencyTokenDep,
    timer_guard: TimerGuardDep,
    timers: TimerServiceDep,
) -> JSONResponse:
    """Start a timer, stopping the member's running one."""
    resolved = require_member(roster, request.member)

    async def operation() -> dict[str, Any]:
        report = await timer_guard.enforce([resolved.name], request.tz_offset)
        entry = await timers.start(
            resolved.name,
            description=request.description,
            project=request.project,
            tz_offset=request.tz_offset,
        )
        return _mutation_body(resolved.name, report.warning, current=_entry(entry))

    return await _run_idempotent(
        scope=SCOPE_START,
        subject_id=resolved.name,
        token=token,
        guard=idempotency,
        ttls=settings.idempotency,
        operation=operation,
    )


@router.post("/stop")
async def stop_timer(
    request: StopTimerRequest,
    settings: SettingsDep,
    roster: TeamRosterDep,
    idempotency: IdempotencyGuardDep,
    token: IdempotencyTokenDep,
    timer_guard: TimerGuardDep,
    timers: TimerServiceDep,
) -> JSONResponse:
    resolved = require_member(roster, request.member)

    async def operation() -> dict[str, Any]:
        report = await timer_guard.enforce([resolved.name], request.tz_offset)
        stopped = await timers.stop(resolved.name)
        return _mutation_body(resolved.name, report.warning, current=None, entry=_entry(stopped))

    return await _run_idempotent(
        scope=SCOPE_STOP,
        subject_id=resolved.name,
        token=token,
        guard=idempotency,
        ttls=settings.idempotency,
        operation=operation,
    )


@router.post("/update")
async def update_entry(
    request: UpdateEntryRequest,
    settings: SettingsDep,
    roster: TeamRosterDep,
    idempotency: IdempotencyGuardDep,
    token: IdempotencyTokenDep,
    timer_guard: TimerGuardDep,
    timers: TimerServiceDep,
) -> JSONResponse:
    """Manually edit a stored entry's times and metadata."""
    resolved = require_member(roster, request.member)

    async def operation() -> dict[str, Any]:
        report = await timer_guard.enforce([resolved.name], request.tz_offset)
        entry = await timers.update_entry(
            resolved.name,
            request.entry_id,
            start=request.start_at,
            stop=request.stop_at,
            description=request.description,
            project=request.project,
            tz_offset=request.tz_offset,
        )
        return _mutation_body(resolved.name, report.warning, entry=_entry(entry))

    return await _run_idempotent(
        scope=SCOPE_UPDATE,
        subject_id=resolved.name,
        token=token,
        guard=idempotency,
        ttls=settings.idempotency,
        operation=operation,
    )


@router.post("/delete")
async def delete_entry(
    request: DeleteEntryRequest,
    settings: SettingsDep,
    roster: TeamRosterDep,
    idempotency: IdempotencyGuardDep,
    token: IdempotencyTokenDep,
    timers: TimerServiceDep,
) -> JSONResponse:
    resolved = require_member(roster, request.member)

    async def operation() -> dict[str, Any]:
        await timers.delete(resolved.name, request.entry_id)
        return _mutation_body(resolved.name, None, entryId=request.entry_id)

    return await _run_idempotent(
        scope=SCOPE_DELETE,
        subject_id=resolved.name,
        token=token,
        guard=idempotency,
        ttls=settings.idempotency,
        operation=operation,
    )
