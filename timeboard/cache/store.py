"""SnapshotStore abstract interface."""

from abc import ABC, abstractmethod

from timeboard.cache.models import Snapshot


class SnapshotStore(ABC):
    """Durable key/value table of snapshots.

    Survives process restarts and is shared by every instance. Implementations
    raise on backend failure; the SnapshotCache decides what to do about it.
    """

    @abstractmethod
    async def get_latest(self, key: str) -> Snapshot | None:
        """Read the most recently written snapshot for a key."""
        pass

    @abstractmethod
    async def upsert(self, snapshot: Snapshot) -> None:
        """Insert the snapshot, replacing any existing one for its key."""
        pass

    async def close(self) -> None:
        """Release backend connections."""
        return None
