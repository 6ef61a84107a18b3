"""Idempotency records."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel


class IdempotencyRecord(BaseModel):
    """Stored outcome of one execution of a mutating operation.

    Keyed by ``(scope, subject_id, token)``; at most one live record per key.
    """

    scope: str
    subject_id: str
    token: str
    status: int
    body: Any
    expires_at: datetime

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.scope, self.subject_id, self.token)

    def is_live(self, now: datetime) -> bool:
        return now < self.expires_at


@dataclass(frozen=True)
class ReplayedResponse:
    """Status and body to return verbatim instead of re-executing."""

    status: int
    body: Any
