"""Business-rule failures of timer operations."""


class TimerError(Exception):
    """Base class for timer rule violations."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MaxDurationExceededError(TimerError):
    """An entry would last longer than the configured maximum."""

    def __init__(self, max_seconds: int) -> None:
        hours = max_seconds / 3600
        super().__init__(f"Time entries cannot exceed {hours:g} hours")
        self.max_seconds = max_seconds


class NoRunningTimerError(TimerError):
    def __init__(self, member: str) -> None:
        super().__init__(f"No running timer for {member}")
        self.member = member


class InvalidTimeRangeError(TimerError):
    def __init__(self, message: str = "Stop time must be after start time") -> None:
        super().__init__(message)


class TimeEntryNotFoundError(TimerError):
    def __init__(self, entry_id: int) -> None:
        super().__init__(f"Time entry {entry_id} not found")
        self.entry_id = entry_id
