"""Upstream time-tracking API configuration."""

from pydantic import BaseModel, Field


class UpstreamConfig(BaseModel):
    """Connection settings for the upstream time-tracking API."""

    base_url: str = Field(
        default="https://api.track.toggl.com/api/v9",
        description="API base URL",
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Upper bound for a single upstream fetch; "
        "a fetch that exceeds it is treated as a hard failure",
    )
    coalesce_refreshes: bool = Field(
        default=False,
        description="Share one in-flight upstream call between concurrent "
        "refreshes of the same cache key",
    )
