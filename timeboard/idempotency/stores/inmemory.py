"""In-memory implementation of IdempotencyStore."""

from timeboard.idempotency.models import IdempotencyRecord
from timeboard.idempotency.store import IdempotencyStore
from timeboard.utils.clock import Clock, utc_now


class InMemoryIdempotencyStore(IdempotencyStore):
    """In-memory idempotency store for testing and single-instance deployments.

    Expired records are pruned lazily on every access. For multiple instances
    use the Redis-backed store.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        """Initialize the store.

        Args:
            clock: Source of the current time
        """
        self._clock = clock
        self._records: dict[tuple[str, str, str], IdempotencyRecord] = {}

    def _prune_expired(self) -> None:
        """Remove expired records."""
        now = self._clock()
        expired_keys = [key for key, record in self._records.items() if not record.is_live(now)]
        for key in expired_keys:
            del self._records[key]

    async def get(self, scope: str, subject_id: str, token: str) -> IdempotencyRecord | None:
        self._prune_expired()
        return self._records.get((scope, subject_id, token))

    async def insert_if_absent(self, record: IdempotencyRecord, ttl_seconds: int) -> bool:
        self._prune_expired()
        if record.key in self._records:
            return False
        self._records[record.key] = record
        return True

    def clear(self) -> None:
        """Drop every record."""
        self._records.clear()
