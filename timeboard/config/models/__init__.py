"""Configuration section models."""

from timeboard.config.models.api import APIConfig
from timeboard.config.models.observability import LoggingConfig, ObservabilityConfig
from timeboard.config.models.resilience import CacheConfig, IdempotencyConfig, TimerConfig
from timeboard.config.models.storage import (
    IdempotencyStoreConfig,
    SnapshotStoreConfig,
    StorageConfig,
    TimeEntryStoreConfig,
)
from timeboard.config.models.team import TeamConfig, TeamMemberConfig
from timeboard.config.models.upstream import UpstreamConfig

__all__ = [
    "APIConfig",
    "CacheConfig",
    "IdempotencyConfig",
    "IdempotencyStoreConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "SnapshotStoreConfig",
    "StorageConfig",
    "TeamConfig",
    "TeamMemberConfig",
    "TimeEntryStoreConfig",
    "TimerConfig",
    "UpstreamConfig",
]
