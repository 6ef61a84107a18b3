"""Redis implementation of SnapshotStore."""

from typing import Any

from timeboard.cache.models import Snapshot
from timeboard.cache.store import SnapshotStore
from timeboard.config.models.storage import SnapshotStoreConfig
from timeboard.observability.logging import get_logger

logger = get_logger(__name__)


class RedisSnapshotStore(SnapshotStore):
    """Snapshots stored as one JSON string per cache key.

    ``SET`` replaces the previous value atomically, which gives the
    insert-or-replace semantics the cache relies on. Keys carry no expiry
    unless ``retention_seconds`` is configured: an expired snapshot must stay
    readable as a fallback.
    """

    def __init__(self, redis_client: Any, config: SnapshotStoreConfig | None = None) -> None:
        """Initialize the store.

        Args:
            redis_client: ``redis.asyncio.Redis`` client
            config: Snapshot store configuration
        """
        self._redis = redis_client
        self._config = config or SnapshotStoreConfig(backend="redis")

    def _key(self, key: str) -> str:
        return f"{self._config.key_prefix}:{key}"

    async def get_latest(self, key: str) -> Snapshot | None:
        raw = await self._redis.get(self._key(key))
        if raw is None:
            return None
        return Snapshot.model_validate_json(raw)

    async def upsert(self, snapshot: Snapshot) -> None:
        await self._redis.set(
            self._key(snapshot.key),
            snapshot.model_dump_json(),
            ex=self._config.retention_seconds,
        )
        logger.debug("redis_snapshot_written", key=snapshot.key)

    async def close(self) -> None:
        await self._redis.aclose()
