"""Upstream time entry model."""

import math
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TimeEntry(BaseModel):
    """A time entry as returned by the upstream API.

    A running entry has no ``stop`` and a negative ``duration`` sentinel,
    so its length has to be computed from ``start``.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    description: str | None = None
    start: datetime
    stop: datetime | None = None
    duration: int
    project_id: int | None = None
    tags: list[str] | None = None
    project_name: str | None = Field(default=None, description="Filled in from the project list")

    @property
    def is_running(self) -> bool:
        return self.duration < 0

    def elapsed_seconds(self, now: datetime) -> int:
        """Seconds this entry contributes to a total at ``now``."""
        if self.duration >= 0:
            return self.duration
        return max(0, math.floor((now - self.start).total_seconds()))
