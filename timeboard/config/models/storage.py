"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

SnapshotBackendType = Literal["inmemory", "redis", "postgrest"]
IdempotencyBackendType = Literal["inmemory", "redis"]
TimeEntryBackendType = Literal["inmemory", "redis"]


class SnapshotStoreConfig(BaseModel):
    """Durable tier of the snapshot cache."""

    backend: SnapshotBackendType = Field(
        default="inmemory",
        description="Backend type",
    )
    connection_url: str | None = Field(
        default=None,
        description="Redis URL or PostgREST base URL (from env var)",
    )
    key_prefix: str = Field(
        default="snapshot",
        description="Redis key prefix for snapshot keys",
    )
    retention_seconds: int | None = Field(
        default=None,
        gt=0,
        description="Drop durable snapshots this long after their last write; "
        "None keeps them until superseded",
    )
    service_key: str | None = Field(
        default=None,
        description="PostgREST service role key (from env var)",
    )
    table: str = Field(
        default="cache_snapshots",
        description="PostgREST table holding snapshots",
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Request timeout for the durable store",
    )


class IdempotencyStoreConfig(BaseModel):
    """Backend for idempotency records."""

    backend: IdempotencyBackendType = Field(
        default="inmemory",
        description="Backend type",
    )
    connection_url: str | None = Field(
        default=None,
        description="Redis URL (from env var)",
    )
    key_prefix: str = Field(
        default="idempotency",
        description="Redis key prefix for idempotency records",
    )


class TimeEntryStoreConfig(BaseModel):
    """Backend for time entries owned by this service."""

    backend: TimeEntryBackendType = Field(
        default="inmemory",
        description="Backend type",
    )
    connection_url: str | None = Field(
        default=None,
        description="Redis URL (from env var)",
    )
    key_prefix: str = Field(
        default="timers",
        description="Redis key prefix for time entries and running pointers",
    )


class StorageConfig(BaseModel):
    """Configuration for all storage backends."""

    snapshots: SnapshotStoreConfig = Field(
        default_factory=SnapshotStoreConfig,
        description="Snapshot cache durable tier",
    )
    idempotency: IdempotencyStoreConfig = Field(
        default_factory=IdempotencyStoreConfig,
        description="Idempotency record store",
    )
    timers: TimeEntryStoreConfig = Field(
        default_factory=TimeEntryStoreConfig,
        description="Time entry store",
    )
