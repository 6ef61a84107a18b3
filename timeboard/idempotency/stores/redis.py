"""Redis implementation of IdempotencyStore."""

from typing import Any

from pydantic import ValidationError

from timeboard.config.models.storage import IdempotencyStoreConfig
from timeboard.idempotency.models import IdempotencyRecord
from timeboard.idempotency.store import IdempotencyStore
from timeboard.observability.logging import get_logger

logger = get_logger(__name__)


class RedisIdempotencyStore(IdempotencyStore):
    """Records stored with ``SET NX EX`` so the first write for a key wins.

    Redis expires the key together with the record, so a later write after
    expiry starts a new record.
    """

    def __init__(self, redis_client: Any, config: IdempotencyStoreConfig | None = None) -> None:
        """Initialize the store.

        Args:
            redis_client: ``redis.asyncio.Redis`` client
            config: Idempotency store configuration
        """
        self._redis = redis_client
        self._config = config or IdempotencyStoreConfig(backend="redis")

    def _key(self, scope: str, subject_id: str, token: str) -> str:
        return f"{self._config.key_prefix}:{scope}:{subject_id}:{token}"

    async def get(self, scope: str, subject_id: str, token: str) -> IdempotencyRecord | None:
        raw = await self._redis.get(self._key(scope, subject_id, token))
        if raw is None:
            return None

        try:
            return IdempotencyRecord.model_validate_json(raw)
        except ValidationError:
            # Corrupted value, treat as absent
            logger.warning("idempotency_corrupted_value", scope=scope)
            return None

    async def insert_if_absent(self, record: IdempotencyRecord, ttl_seconds: int) -> bool:
        stored = await self._redis.set(
            self._key(record.scope, record.subject_id, record.token),
            record.model_dump_json(),
            ex=max(1, ttl_seconds),
            nx=True,
        )
        return bool(stored)

    async def close(self) -> None:
        await self._redis.aclose()
