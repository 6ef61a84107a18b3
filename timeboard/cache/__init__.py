"""Snapshot cache: a process-local tier over a durable, shared snapshot store."""

from timeboard.cache.keys import member_day_key, team_day_key, team_week_key
from timeboard.cache.models import Snapshot
from timeboard.cache.snapshot_cache import SnapshotCache
from timeboard.cache.store import SnapshotStore

__all__ = [
    "Snapshot",
    "SnapshotCache",
    "SnapshotStore",
    "member_day_key",
    "team_day_key",
    "team_week_key",
]
