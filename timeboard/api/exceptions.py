"""API exception hierarchy for consistent error handling.

All API exceptions inherit from TimeboardAPIError, which provides
status_code and error_code attributes used by the global exception
handler to generate consistent error responses. Errors raised by the
core packages (UpstreamError, TimerError) are translated here.
"""

from timeboard.api.models.errors import ErrorBody, ErrorCode, ErrorResponse
from timeboard.timers.errors import TimeEntryNotFoundError, TimerError
from timeboard.upstream.errors import UpstreamError, UpstreamErrorKind


class TimeboardAPIError(Exception):
    """Base exception for all API errors.

    Subclasses set status_code and error_code to define the HTTP response.
    """

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    @property
    def headers(self) -> dict[str, str]:
        """Response headers to send with the error."""
        return {}

    def to_body(self) -> ErrorBody:
        return ErrorBody(code=self.error_code, message=self.message)

    def to_content(self) -> dict:
        return ErrorResponse(error=self.to_body()).to_content()


class InvalidRequestError(TimeboardAPIError):
    """Raised when request validation fails."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class MemberNotFoundError(TimeboardAPIError):
    """Raised when a member name is not on the team roster."""

    status_code = 404
    error_code = ErrorCode.MEMBER_NOT_FOUND


class EntryNotFoundError(TimeboardAPIError):
    status_code = 404
    error_code = ErrorCode.ENTRY_NOT_FOUND


class TimerRuleViolationError(TimeboardAPIError):
    """Raised when a timer operation breaks a business rule."""

    status_code = 400
    error_code = ErrorCode.TIMER_RULE_VIOLATION


class UpstreamRateLimitedError(TimeboardAPIError):
    """Raised when the upstream rate-limited a refresh with nothing cached."""

    status_code = 429
    error_code = ErrorCode.UPSTREAM_RATE_LIMITED

    def __init__(
        self,
        message: str,
        retry_after: str | None = None,
        quota_remaining: str | None = None,
        quota_resets_in: str | None = None,
    ) -> None:
        super().__init__(message)
        self.retry_after = retry_after
        self.quota_remaining = quota_remaining
        self.quota_resets_in = quota_resets_in

    @property
    def headers(self) -> dict[str, str]:
        return {"Retry-After": self.retry_after} if self.retry_after else {}

    def to_body(self) -> ErrorBody:
        return ErrorBody(
            code=self.error_code,
            message=self.message,
            retry_after=self.retry_after,
            quota_remaining=self.quota_remaining,
            quota_resets_in=self.quota_resets_in,
        )


class UpstreamQuotaExhaustedError(TimeboardAPIError):
    """Raised when the upstream quota is exhausted with nothing cached."""

    status_code = 402
    error_code = ErrorCode.UPSTREAM_QUOTA_EXHAUSTED

    def __init__(
        self,
        message: str,
        quota_remaining: str | None = None,
        quota_resets_in: str | None = None,
    ) -> None:
        super().__init__(message)
        self.quota_remaining = quota_remaining
        self.quota_resets_in = quota_resets_in

    @property
    def headers(self) -> dict[str, str]:
        return {"X-Toggl-Quota-Resets-In": self.quota_resets_in} if self.quota_resets_in else {}

    def to_body(self) -> ErrorBody:
        return ErrorBody(
            code=self.error_code,
            message=self.message,
            quota_remaining=self.quota_remaining,
            quota_resets_in=self.quota_resets_in,
        )


class UpstreamUnavailableError(TimeboardAPIError):
    """Raised when the upstream failed with nothing cached.

    Carries the upstream's own status code.
    """

    error_code = ErrorCode.UPSTREAM_UNAVAILABLE

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.status_code = status_code


class StorageUnavailableError(TimeboardAPIError):
    status_code = 500
    error_code = ErrorCode.STORAGE_UNAVAILABLE


def from_upstream_error(error: UpstreamError) -> TimeboardAPIError:
    """Translate an unrecovered upstream failure into its API error."""
    if error.kind is UpstreamErrorKind.RATE_LIMITED:
        return UpstreamRateLimitedError(
            error.message,
            retry_after=error.retry_after,
            quota_remaining=error.quota_remaining,
            quota_resets_in=error.quota_resets_in,
        )
    if error.kind is UpstreamErrorKind.QUOTA_EXHAUSTED:
        return UpstreamQuotaExhaustedError(
            error.message,
            quota_remaining=error.quota_remaining,
            quota_resets_in=error.quota_resets_in,
        )
    status = error.status_code
    return UpstreamUnavailableError(error.message, status if status is not None and status >= 400 else 502)


def from_timer_error(error: TimerError) -> TimeboardAPIError:
    """Classify a timer rule violation by type."""
    if isinstance(error, TimeEntryNotFoundError):
        return EntryNotFoundError(error.message)
    return TimerRuleViolationError(error.message)
