"""Client and failure taxonomy for the upstream time-tracking API."""

from timeboard.upstream.client import TogglClient
from timeboard.upstream.errors import UpstreamError, UpstreamErrorKind
from timeboard.upstream.models import TimeEntry
from timeboard.upstream.outcome import (
    HardFailure,
    QuotaExhausted,
    RateLimited,
    Success,
    UpstreamOutcome,
    outcome_from_error,
)

__all__ = [
    "HardFailure",
    "QuotaExhausted",
    "RateLimited",
    "Success",
    "TimeEntry",
    "TogglClient",
    "UpstreamError",
    "UpstreamErrorKind",
    "UpstreamOutcome",
    "outcome_from_error",
]
