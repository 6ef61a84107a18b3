"""Injectable wall clock."""

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]
"""Returns the current timezone-aware UTC time."""


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)
