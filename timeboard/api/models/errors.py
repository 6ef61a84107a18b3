"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ErrorCode(str, Enum):
    """Machine-readable error codes for API responses."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (bad date, missing member, malformed body)."""

    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    """The member is not on the configured team."""

    ENTRY_NOT_FOUND = "ENTRY_NOT_FOUND"
    """The time entry does not exist for this member."""

    TIMER_RULE_VIOLATION = "TIMER_RULE_VIOLATION"
    """A timer business rule was violated."""

    UPSTREAM_RATE_LIMITED = "UPSTREAM_RATE_LIMITED"
    """The upstream API rate-limited the request and nothing was cached."""

    UPSTREAM_QUOTA_EXHAUSTED = "UPSTREAM_QUOTA_EXHAUSTED"
    """The upstream quota is used up and nothing was cached."""

    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    """The upstream API failed and nothing was cached."""

    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    """A required store could not be reached."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information for validation failures."""

    field: str | None = None
    message: str


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    code: ErrorCode
    """Machine-readable error code."""

    message: str
    """Human-readable error message."""

    details: list[ErrorDetail] | None = None
    """Additional error details for validation failures."""

    retry_after: str | None = None
    """Upstream retry hint for rate-limited failures."""

    quota_remaining: str | None = None
    quota_resets_in: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "UPSTREAM_RATE_LIMITED",
                "message": "Rate limited by Toggl. Please retry shortly.",
                "retryAfter": "30"
            }
        }
    """

    error: ErrorBody

    def to_content(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
