"""Replay of mutating-request results keyed by a caller-supplied token."""

from timeboard.idempotency.guard import IdempotencyGuard
from timeboard.idempotency.models import IdempotencyRecord, ReplayedResponse
from timeboard.idempotency.store import IdempotencyStore

__all__ = [
    "IdempotencyGuard",
    "IdempotencyRecord",
    "IdempotencyStore",
    "ReplayedResponse",
]
