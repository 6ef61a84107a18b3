"""Time entry records owned by this service."""

import math
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TimerEntry(BaseModel):
    """A tracked time entry.

    ``stop`` is None while the entry is running; at most one entry per member
    is running at any instant.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    member: str
    description: str | None = None
    project: str | None = None
    start: datetime
    stop: datetime | None = None
    entry_date: str = Field(description="Local calendar day the entry belongs to")
    auto_stopped: bool = False

    @property
    def is_running(self) -> bool:
        return self.stop is None

    def elapsed_seconds(self, now: datetime) -> int:
        end = self.stop if self.stop is not None else now
        return max(0, math.floor((end - self.start).total_seconds()))
