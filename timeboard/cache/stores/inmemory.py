"""In-memory implementation of SnapshotStore."""

from timeboard.cache.models import Snapshot
from timeboard.cache.store import SnapshotStore


class InMemorySnapshotStore(SnapshotStore):
    """In-memory implementation of SnapshotStore for testing and development.

    Not shared between processes, so it gives none of the cross-instance
    guarantees of a real durable tier.
    """

    def __init__(self) -> None:
        self._snapshots: dict[str, Snapshot] = {}

    async def get_latest(self, key: str) -> Snapshot | None:
        return self._snapshots.get(key)

    async def upsert(self, snapshot: Snapshot) -> None:
        self._snapshots[snapshot.key] = snapshot
