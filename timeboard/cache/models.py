"""Snapshot model."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class Snapshot(BaseModel):
    """A timestamped copy of a previously computed view payload.

    Snapshots are only ever superseded by a newer write for the same key;
    an expired snapshot stays readable as a degraded fallback.
    """

    key: str = Field(..., description="Cache key of the view")
    payload: Any = Field(..., description="JSON-serializable view payload")
    created_at: datetime = Field(..., description="When the payload was computed")
    expires_at: datetime = Field(..., description="End of the freshness window")

    @field_validator("created_at", "expires_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Read offset-less timestamps from durable stores as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def is_fresh(self, now: datetime) -> bool:
        """True until ``now`` passes ``expires_at``."""
        return now <= self.expires_at
