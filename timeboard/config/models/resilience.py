"""TTLs and limits for the cache, idempotency and timer guards."""

from pydantic import BaseModel, Field


class CacheConfig(BaseModel):
    """Snapshot freshness windows, one per view."""

    member_day_ttl_seconds: int = Field(
        default=600,  # 10 minutes
        gt=0,
        description="Freshness of a member's daily entries",
    )
    team_day_ttl_seconds: int = Field(
        default=600,  # 10 minutes
        gt=0,
        description="Freshness of the team daily summary",
    )
    team_week_ttl_seconds: int = Field(
        default=1800,  # 30 minutes
        gt=0,
        description="Freshness of the 7-day team rollup",
    )


class IdempotencyConfig(BaseModel):
    """Replay windows for mutating requests."""

    success_ttl_seconds: int = Field(
        default=180,
        gt=0,
        description="How long a successful result is replayed",
    )
    error_ttl_seconds: int = Field(
        default=60,
        gt=0,
        description="How long an error result is replayed",
    )
    header_names: list[str] = Field(
        default=["X-Idempotency-Key", "Idempotency-Key"],
        description="Request headers carrying the idempotency token, in priority order",
    )


class TimerConfig(BaseModel):
    """Running timer limits."""

    max_running_seconds: int = Field(
        default=7200,  # 2 hours
        gt=0,
        description="Running timers older than this are auto-stopped",
    )
    max_entry_seconds: int = Field(
        default=7200,  # 2 hours
        gt=0,
        description="Longest duration accepted on manual edits and backdating",
    )
