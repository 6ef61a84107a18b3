"""Payload models for the cached read views.

Payloads are cached as JSON with camelCase keys, exactly as they are served.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from timeboard.upstream.models import TimeEntry


class ViewModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MemberDayPayload(ViewModel):
    """One member's entries for one calendar day."""

    date: str
    entries: list[TimeEntry] = Field(default_factory=list)
    current: TimeEntry | None = None
    total_seconds: int = 0


class TeamMemberDay(ViewModel):
    name: str
    entries: list[TimeEntry] = Field(default_factory=list)
    current: TimeEntry | None = None
    total_seconds: int = 0


class TeamDayPayload(ViewModel):
    date: str
    members: list[TeamMemberDay] = Field(default_factory=list)


class DaySummary(ViewModel):
    date: str
    seconds: int = 0
    entry_count: int = 0


class MemberWeek(ViewModel):
    name: str
    total_seconds: int = 0
    entry_count: int = 0
    days: list[DaySummary] = Field(default_factory=list)


class TeamWeekPayload(ViewModel):
    """Seven-day rollup ending at ``end_date``, busiest member first."""

    start_date: str
    end_date: str
    week_dates: list[str]
    members: list[MemberWeek] = Field(default_factory=list)
