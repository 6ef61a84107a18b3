"""Shared helpers."""

from timeboard.utils.clock import Clock, utc_now
from timeboard.utils.dates import (
    DATE_PATTERN,
    build_utc_day_range,
    clamp_tz_offset,
    is_valid_date,
    last_seven_dates,
    local_date,
    to_rfc3339,
    today_utc,
)

__all__ = [
    "Clock",
    "DATE_PATTERN",
    "build_utc_day_range",
    "clamp_tz_offset",
    "is_valid_date",
    "last_seven_dates",
    "local_date",
    "to_rfc3339",
    "today_utc",
    "utc_now",
]
