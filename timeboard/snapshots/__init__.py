"""Read views served through the snapshot cache with upstream degradation."""

from timeboard.snapshots.coalescing import SingleFlight
from timeboard.snapshots.orchestrator import (
    DEFAULT_MESSAGES,
    WEEK_MESSAGES,
    DegradationMessages,
    FetchOrchestrator,
    ServedSnapshot,
)
from timeboard.snapshots.service import SnapshotViewService
from timeboard.snapshots.views import (
    MemberDayPayload,
    TeamDayPayload,
    TeamWeekPayload,
    ViewBuilder,
)

__all__ = [
    "DEFAULT_MESSAGES",
    "DegradationMessages",
    "FetchOrchestrator",
    "MemberDayPayload",
    "ServedSnapshot",
    "SingleFlight",
    "SnapshotViewService",
    "TeamDayPayload",
    "TeamWeekPayload",
    "ViewBuilder",
    "WEEK_MESSAGES",
]
