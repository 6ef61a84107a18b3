"""Running timers, the long-running guard and manual entry edits."""

from timeboard.timers.errors import (
    InvalidTimeRangeError,
    MaxDurationExceededError,
    NoRunningTimerError,
    TimeEntryNotFoundError,
    TimerError,
)
from timeboard.timers.guard import GuardReport, LongRunningTimerGuard
from timeboard.timers.models import TimerEntry
from timeboard.timers.service import TimerService
from timeboard.timers.store import TimeEntryStore

__all__ = [
    "GuardReport",
    "InvalidTimeRangeError",
    "LongRunningTimerGuard",
    "MaxDurationExceededError",
    "NoRunningTimerError",
    "TimeEntryNotFoundError",
    "TimeEntryStore",
    "TimerEntry",
    "TimerError",
    "TimerService",
]
