"""Idempotency store implementations."""

from timeboard.idempotency.stores.inmemory import InMemoryIdempotencyStore
from timeboard.idempotency.stores.redis import RedisIdempotencyStore

__all__ = ["InMemoryIdempotencyStore", "RedisIdempotencyStore"]
