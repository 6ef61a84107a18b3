"""SnapshotStore implementations."""

from timeboard.cache.stores.inmemory import InMemorySnapshotStore
from timeboard.cache.stores.postgrest import PostgrestSnapshotStore
from timeboard.cache.stores.redis import RedisSnapshotStore

__all__ = [
    "InMemorySnapshotStore",
    "PostgrestSnapshotStore",
    "RedisSnapshotStore",
]
