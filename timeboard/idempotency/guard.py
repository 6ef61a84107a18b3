"""Idempotency guard for mutating operations.

Callers check ``read_replay`` before doing any side-effecting work and call
``write_result`` exactly once with the outcome, success or error, before
returning it. A retry carrying the same token then receives the original
result instead of repeating the side effect.
"""

from datetime import timedelta
from typing import Any

from timeboard.idempotency.models import IdempotencyRecord, ReplayedResponse
from timeboard.idempotency.store import IdempotencyStore
from timeboard.observability.logging import get_logger
from timeboard.observability.metrics import IDEMPOTENCY_REPLAYS, IDEMPOTENCY_STORE_ERRORS
from timeboard.utils.clock import Clock, utc_now

logger = get_logger(__name__)


def normalize_subject(subject_id: str) -> str:
    return subject_id.strip().lower()


class IdempotencyGuard:
    """Opt-in deduplication of mutating requests.

    A request without a token is never deduplicated. Store failures are
    logged and treated as "no record", so the operation still runs.
    """

    def __init__(self, store: IdempotencyStore, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock

    @property
    def store(self) -> IdempotencyStore:
        return self._store

    async def read_replay(self, scope: str, subject_id: str, token: str | None) -> ReplayedResponse | None:
        """Look up a previously stored result.

        Args:
            scope: Operation name
            subject_id: Entity the operation acts on
            token: Caller-supplied idempotency token

        Returns:
            The stored status and body, or None when there is nothing to replay
        """
        if not token:
            return None

        try:
            record = await self._store.get(scope, normalize_subject(subject_id), token)
        except Exception as e:
            IDEMPOTENCY_STORE_ERRORS.labels(operation="read").inc()
            logger.warning(
                "idempotency_read_failed",
                scope=scope,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        if record is None or not record.is_live(self._clock()):
            return None

        IDEMPOTENCY_REPLAYS.labels(scope=scope).inc()
        logger.info("idempotency_replay", scope=scope, subject_id=record.subject_id, status=record.status)
        return ReplayedResponse(status=record.status, body=record.body)

    async def write_result(
        self,
        scope: str,
        subject_id: str,
        token: str | None,
        status: int,
        body: Any,
        ttl_seconds: int,
    ) -> None:
        """Store the outcome of an execution.

        A live record for the same key is kept, never overwritten, so the
        first execution's result is what every retry sees.
        """
        if not token:
            return

        record = IdempotencyRecord(
            scope=scope,
            subject_id=normalize_subject(subject_id),
            token=token,
            status=status,
            body=body,
            expires_at=self._clock() + timedelta(seconds=ttl_seconds),
        )
        try:
            stored = await self._store.insert_if_absent(record, ttl_seconds)
        except Exception as e:
            IDEMPOTENCY_STORE_ERRORS.labels(operation="write").inc()
            logger.warning(
                "idempotency_write_failed",
                scope=scope,
                error=str(e),
                error_type=type(e).__name__,
            )
            return

        if not stored:
            logger.info("idempotency_record_exists", scope=scope, subject_id=record.subject_id)
