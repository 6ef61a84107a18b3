"""Request bodies for the timer endpoints."""

from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TimerRequest(BaseModel):
    """Fields shared by every timer mutation.

    ``member`` is optional at the schema level so a missing member produces
    the same 400 as a blank one.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    member: str | None = None
    tz_offset: Any = Field(default=None, description="Minutes to add to local time to get UTC")


class StartTimerRequest(TimerRequest):
    description: str | None = None
    project: str | None = None


class StopTimerRequest(TimerRequest):
    pass


class UpdateCurrentRequest(TimerRequest):
    description: str | None = None
    project: str | None = None
    elapsed_seconds: float | None = Field(
        default=None,
        allow_inf_nan=False,
        description="When non-negative, backdate the running entry to have run this long",
    )


class UpdateEntryRequest(TimerRequest):
    entry_id: int = Field(gt=0)
    description: str | None = None
    project: str | None = None
    start_at: AwareDatetime
    stop_at: AwareDatetime


class DeleteEntryRequest(TimerRequest):
    entry_id: int = Field(gt=0)
