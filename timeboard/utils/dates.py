"""Calendar-day helpers shared by the read views and the timer guard.

Timezone offsets follow the browser ``Date.getTimezoneOffset()`` convention:
minutes to add to local time to get UTC (positive west of Greenwich).
"""

import math
import re
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MIN_TZ_OFFSET_MINUTES = -720
MAX_TZ_OFFSET_MINUTES = 840


def clamp_tz_offset(value: Any) -> int:
    """Parse a caller-supplied offset, truncate it and clamp it to [-720, 840].

    Anything that is not a finite number yields 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(parsed):
        return 0
    return max(MIN_TZ_OFFSET_MINUTES, min(MAX_TZ_OFFSET_MINUTES, math.trunc(parsed)))


def is_valid_date(value: str) -> bool:
    """Check a ``YYYY-MM-DD`` string is well formed and a real calendar date."""
    if not DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def today_utc(now: datetime) -> str:
    return now.astimezone(UTC).date().isoformat()


def build_utc_day_range(day: str, tz_offset_minutes: int) -> tuple[datetime, datetime]:
    """UTC instants bounding a local calendar day.

    Returns ``day 00:00:00.000`` and ``day 23:59:59.999`` shifted by the offset.
    """
    parsed = date.fromisoformat(day)
    shift = timedelta(minutes=tz_offset_minutes)
    start = datetime.combine(parsed, time.min, tzinfo=UTC) + shift
    end = datetime.combine(parsed, time(23, 59, 59, 999000), tzinfo=UTC) + shift
    return start, end


def last_seven_dates(end_day: str) -> list[str]:
    """The seven calendar dates ending at (and including) ``end_day``, oldest first."""
    end = date.fromisoformat(end_day)
    return [(end - timedelta(days=i)).isoformat() for i in range(6, -1, -1)]


def local_date(instant: datetime, tz_offset_minutes: int) -> str:
    """Calendar date of a UTC instant as seen by the caller."""
    return (instant.astimezone(UTC) - timedelta(minutes=tz_offset_minutes)).date().isoformat()


def to_rfc3339(instant: datetime) -> str:
    """Format an instant as UTC with millisecond precision and a ``Z`` suffix."""
    return instant.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
