"""TimeEntryStore abstract interface."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from timeboard.timers.models import TimerEntry


class TimeEntryStore(ABC):
    """Storage for time entries.

    Member names are stored case-normalized.
    """

    @abstractmethod
    async def get(self, member: str, entry_id: int) -> TimerEntry | None:
        """Get one of a member's entries by id."""
        pass

    @abstractmethod
    async def get_running(self, member: str) -> TimerEntry | None:
        """Get the member's running entry, if any."""
        pass

    @abstractmethod
    async def list_running(self, members: Iterable[str]) -> list[TimerEntry]:
        """Running entries of the given members."""
        pass

    @abstractmethod
    async def create(
        self,
        member: str,
        *,
        start: datetime,
        entry_date: str,
        description: str | None = None,
        project: str | None = None,
    ) -> TimerEntry:
        """Create a running entry."""
        pass

    @abstractmethod
    async def save(self, entry: TimerEntry) -> TimerEntry:
        """Replace a stored entry."""
        pass

    @abstractmethod
    async def delete(self, member: str, entry_id: int) -> bool:
        """Delete an entry. Returns False if it did not exist."""
        pass

    async def close(self) -> None:
        """Release backend connections."""
        return None
