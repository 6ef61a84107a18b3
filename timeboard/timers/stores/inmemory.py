"""In-memory implementation of TimeEntryStore."""

import itertools
from collections.abc import Iterable
from datetime import datetime

from timeboard.timers.models import TimerEntry
from timeboard.timers.store import TimeEntryStore


def _normalize(member: str) -> str:
    return member.strip().lower()


class InMemoryTimeEntryStore(TimeEntryStore):
    """In-memory implementation of TimeEntryStore for testing and development."""

    def __init__(self) -> None:
        self._entries: dict[int, TimerEntry] = {}
        self._ids = itertools.count(1)

    async def get(self, member: str, entry_id: int) -> TimerEntry | None:
        entry = self._entries.get(entry_id)
        if entry is None or entry.member != _normalize(member):
            return None
        return entry

    async def get_running(self, member: str) -> TimerEntry | None:
        member = _normalize(member)
        for entry in self._entries.values():
            if entry.member == member and entry.is_running:
                return entry
        return None

    async def list_running(self, members: Iterable[str]) -> list[TimerEntry]:
        wanted = {_normalize(m) for m in members}
        return [e for e in self._entries.values() if e.is_running and e.member in wanted]

    async def create(
        self,
        member: str,
        *,
        start: datetime,
        entry_date: str,
        description: str | None = None,
        project: str | None = None,
    ) -> TimerEntry:
        entry = TimerEntry(
            id=next(self._ids),
            member=_normalize(member),
            description=description,
            project=project,
            start=start,
            entry_date=entry_date,
        )
        self._entries[entry.id] = entry
        return entry

    async def save(self, entry: TimerEntry) -> TimerEntry:
        self._entries[entry.id] = entry
        return entry

    async def delete(self, member: str, entry_id: int) -> bool:
        if await self.get(member, entry_id) is None:
            return False
        del self._entries[entry_id]
        return True

    def all_entries(self) -> list[TimerEntry]:
        """Every stored entry, oldest id first."""
        return sorted(self._entries.values(), key=lambda e: e.id)
