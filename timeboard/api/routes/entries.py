"""Member day view."""

from typing import Any

from fastapi import APIRouter, Query

from timeboard.api.dependencies import TeamRosterDep, ViewServiceDep
from timeboard.api.models.views import render_envelope
from timeboard.api.routes.params import parse_date, parse_refresh, require_member
from timeboard.observability.logging import get_logger
from timeboard.utils.dates import clamp_tz_offset

logger = get_logger(__name__)

router = APIRouter()


@router.get("/entries")
async def get_member_entries(
    roster: TeamRosterDep,
    service: ViewServiceDep,
    member: str | None = Query(default=None, description="Team member name"),
    date: str | None = Query(default=None, description="Day as YYYY-MM-DD, defaults to today (UTC)"),
    refresh: str | None = Query(default=None, description="1 to fetch from the upstream"),
    tz_offset: str | None = Query(default=None, alias="tzOffset"),
) -> dict[str, Any]:
    """Get one member's entries for a day.

    Served from the snapshot cache unless a refresh is requested.

    Args:
        roster: Team roster
        service: Read view service
        member: Member name, case-insensitive
        date: Requested day
        refresh: Whether to spend upstream quota
        tz_offset: Caller's timezone offset in minutes

    Returns:
        The day's entries merged with the freshness envelope
    """
    resolved = require_member(roster, member)
    day = parse_date(date)
    served = await service.member_day(
        resolved,
        day,
        refresh=parse_refresh(refresh),
        tz_offset=clamp_tz_offset(tz_offset),
    )
    logger.debug("member_day_served", member=resolved.name, date=day, stale=served.stale)
    return render_envelope(served)
