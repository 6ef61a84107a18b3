"""Upstream failure classification."""

from enum import Enum

import httpx

QUOTA_REMAINING_HEADER = "X-Toggl-Quota-Remaining"
QUOTA_RESETS_IN_HEADER = "X-Toggl-Quota-Resets-In"


class UpstreamErrorKind(str, Enum):
    """How an upstream failure should be handled."""

    RATE_LIMITED = "rate_limited"
    """HTTP 429, transient; retry after the hinted delay."""

    QUOTA_EXHAUSTED = "quota_exhausted"
    """HTTP 402, metered allowance used up until the quota resets."""

    HARD_FAILURE = "hard_failure"
    """Any other non-2xx status, network fault, timeout or malformed body."""


class UpstreamError(Exception):
    """Failure of an upstream call, with the metadata needed to report it."""

    def __init__(
        self,
        kind: UpstreamErrorKind,
        message: str,
        *,
        status_code: int | None = None,
        retry_after: str | None = None,
        quota_remaining: str | None = None,
        quota_resets_in: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.retry_after = retry_after
        self.quota_remaining = quota_remaining
        self.quota_resets_in = quota_resets_in

    @classmethod
    def from_response(cls, response: httpx.Response, context: str) -> "UpstreamError":
        """Classify a non-2xx response by status code."""
        status = response.status_code
        if status == 429:
            kind = UpstreamErrorKind.RATE_LIMITED
        elif status == 402:
            kind = UpstreamErrorKind.QUOTA_EXHAUSTED
        else:
            kind = UpstreamErrorKind.HARD_FAILURE

        return cls(
            kind,
            f"{context} ({status})",
            status_code=status,
            retry_after=response.headers.get("Retry-After"),
            quota_remaining=response.headers.get(QUOTA_REMAINING_HEADER),
            quota_resets_in=response.headers.get(QUOTA_RESETS_IN_HEADER),
        )

    @classmethod
    def hard(cls, message: str, status_code: int | None = None) -> "UpstreamError":
        return cls(UpstreamErrorKind.HARD_FAILURE, message, status_code=status_code)
