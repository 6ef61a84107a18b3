"""Time entry store implementations."""

from timeboard.timers.stores.inmemory import InMemoryTimeEntryStore
from timeboard.timers.stores.redis import RedisTimeEntryStore

__all__ = ["InMemoryTimeEntryStore", "RedisTimeEntryStore"]
