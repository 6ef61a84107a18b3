"""Result of one upstream fetch, as consumed by the fetch orchestrator."""

from dataclasses import dataclass
from typing import Any

from timeboard.upstream.errors import UpstreamError, UpstreamErrorKind


@dataclass(frozen=True)
class Success:
    data: Any


@dataclass(frozen=True)
class RateLimited:
    retry_after: str | None = None
    quota_remaining: str | None = None
    quota_resets_in: str | None = None
    message: str = "Rate limited"


@dataclass(frozen=True)
class QuotaExhausted:
    quota_remaining: str | None = None
    quota_resets_in: str | None = None
    message: str = "Quota exhausted"


@dataclass(frozen=True)
class HardFailure:
    status_code: int | None = None
    message: str = "Upstream unavailable"


UpstreamOutcome = Success | RateLimited | QuotaExhausted | HardFailure


def outcome_from_error(error: UpstreamError) -> UpstreamOutcome:
    """Map a classified upstream error onto its outcome variant."""
    if error.kind is UpstreamErrorKind.RATE_LIMITED:
        return RateLimited(
            retry_after=error.retry_after,
            quota_remaining=error.quota_remaining,
            quota_resets_in=error.quota_resets_in,
            message=error.message,
        )
    if error.kind is UpstreamErrorKind.QUOTA_EXHAUSTED:
        return QuotaExhausted(
            quota_remaining=error.quota_remaining,
            quota_resets_in=error.quota_resets_in,
            message=error.message,
        )
    return HardFailure(status_code=error.status_code, message=error.message)
