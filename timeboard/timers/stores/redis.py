"""Redis implementation of TimeEntryStore."""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from timeboard.config.models.storage import TimeEntryStoreConfig
from timeboard.observability.logging import get_logger
from timeboard.timers.models import TimerEntry
from timeboard.timers.store import TimeEntryStore

logger = get_logger(__name__)


def _normalize(member: str) -> str:
    return member.strip().lower()


class RedisTimeEntryStore(TimeEntryStore):
    """Time entries kept in Redis so they survive restarts and are shared by workers.

    Key layout under ``key_prefix``:

    - ``{prefix}:next_id``: counter allocating entry ids
    - ``{prefix}:entry:{id}``: entry JSON
    - ``{prefix}:running:{member}``: id of the member's running entry
    """

    def __init__(self, redis_client: Any, config: TimeEntryStoreConfig | None = None) -> None:
        """Initialize the store.

        Args:
            redis_client: ``redis.asyncio.Redis`` client
            config: Time entry store configuration
        """
        self._redis = redis_client
        self._config = config or TimeEntryStoreConfig(backend="redis")

    def _entry_key(self, entry_id: int) -> str:
        return f"{self._config.key_prefix}:entry:{entry_id}"

    def _running_key(self, member: str) -> str:
        return f"{self._config.key_prefix}:running:{_normalize(member)}"

    async def _load(self, entry_id: int) -> TimerEntry | None:
        raw = await self._redis.get(self._entry_key(entry_id))
        if raw is None:
            return None

        try:
            return TimerEntry.model_validate_json(raw)
        except ValidationError:
            # Corrupted value, treat as absent
            logger.warning("time_entry_corrupted_value", entry_id=entry_id)
            return None

    async def _running_id(self, member: str) -> int | None:
        raw = await self._redis.get(self._running_key(member))
        return int(raw) if raw is not None else None

    async def get(self, member: str, entry_id: int) -> TimerEntry | None:
        entry = await self._load(entry_id)
        if entry is None or entry.member != _normalize(member):
            return None
        return entry

    async def get_running(self, member: str) -> TimerEntry | None:
        entry_id = await self._running_id(member)
        if entry_id is None:
            return None
        entry = await self.get(member, entry_id)
        if entry is None or not entry.is_running:
            return None
        return entry

    async def list_running(self, members: Iterable[str]) -> list[TimerEntry]:
        running = []
        for member in dict.fromkeys(_normalize(m) for m in members):
            entry = await self.get_running(member)
            if entry is not None:
                running.append(entry)
        return running

    async def create(
        self,
        member: str,
        *,
        start: datetime,
        entry_date: str,
        description: str | None = None,
        project: str | None = None,
    ) -> TimerEntry:
        entry_id = await self._redis.incr(f"{self._config.key_prefix}:next_id")
        entry = TimerEntry(
            id=int(entry_id),
            member=_normalize(member),
            description=description,
            project=project,
            start=start,
            entry_date=entry_date,
        )
        await self._redis.set(self._entry_key(entry.id), entry.model_dump_json())
        await self._redis.set(self._running_key(entry.member), str(entry.id))
        return entry

    async def save(self, entry: TimerEntry) -> TimerEntry:
        await self._redis.set(self._entry_key(entry.id), entry.model_dump_json())
        if entry.is_running:
            await self._redis.set(self._running_key(entry.member), str(entry.id))
        elif await self._running_id(entry.member) == entry.id:
            await self._redis.delete(self._running_key(entry.member))
        return entry

    async def delete(self, member: str, entry_id: int) -> bool:
        entry = await self.get(member, entry_id)
        if entry is None:
            return False
        await self._redis.delete(self._entry_key(entry_id))
        if await self._running_id(entry.member) == entry_id:
            await self._redis.delete(self._running_key(entry.member))
        return True

    async def close(self) -> None:
        await self._redis.aclose()
