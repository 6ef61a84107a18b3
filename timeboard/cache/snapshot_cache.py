"""Two-tier read-through/write-through snapshot cache."""

from datetime import timedelta
from typing import Any

from timeboard.cache.models import Snapshot
from timeboard.cache.store import SnapshotStore
from timeboard.observability.logging import get_logger
from timeboard.observability.metrics import (
    SNAPSHOT_CACHE_HITS,
    SNAPSHOT_CACHE_MISSES,
    SNAPSHOT_STORE_ERRORS,
)
from timeboard.utils.clock import Clock, utc_now

logger = get_logger(__name__)


class SnapshotCache:
    """Process-local snapshot map in front of a durable SnapshotStore.

    Reads check the local tier first and fall back to the durable store,
    repopulating the local tier on a durable hit. Writes land in the local
    tier immediately and are then written through to the durable store.

    The durable store is best-effort: any failure reading it is a miss and
    any failure writing it is logged and dropped. Callers never see store
    exceptions because they always have a non-cache path to fall back on.

    One instance is created per process and shared by all requests. Writes
    to the same key are last-write-wins.
    """

    def __init__(self, store: SnapshotStore | None = None, clock: Clock = utc_now) -> None:
        """Initialize the cache.

        Args:
            store: Durable tier; None runs with the local tier only
            clock: Source of the current time
        """
        self._store = store
        self._clock = clock
        self._local: dict[str, Snapshot] = {}

    @property
    def store(self) -> SnapshotStore | None:
        return self._store

    async def get(self, key: str, fresh_only: bool) -> Snapshot | None:
        """Look up a snapshot.

        Args:
            key: Cache key
            fresh_only: Reject snapshots whose freshness window has passed

        Returns:
            The snapshot, or None on a miss
        """
        now = self._clock()

        local = self._local.get(key)
        if local is not None and (not fresh_only or local.is_fresh(now)):
            SNAPSHOT_CACHE_HITS.labels(tier="local").inc()
            return local

        durable = await self._read_durable(key)
        if durable is not None:
            # A sibling instance may have refreshed the key since our last write
            if local is None or durable.expires_at >= local.expires_at:
                self._local[key] = durable
                local = durable

        if local is not None and (not fresh_only or local.is_fresh(now)):
            SNAPSHOT_CACHE_HITS.labels(tier="durable").inc()
            return local

        SNAPSHOT_CACHE_MISSES.labels(mode="fresh" if fresh_only else "any").inc()
        return None

    async def set(self, key: str, payload: Any, ttl_seconds: int) -> Snapshot:
        """Store a freshly computed payload.

        Args:
            key: Cache key
            payload: JSON-serializable view payload
            ttl_seconds: Freshness window

        Returns:
            The snapshot now held by the local tier
        """
        now = self._clock()
        snapshot = Snapshot(
            key=key,
            payload=payload,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )
        self._local[key] = snapshot

        if self._store is not None:
            try:
                await self._store.upsert(snapshot)
            except Exception as e:
                SNAPSHOT_STORE_ERRORS.labels(operation="write").inc()
                logger.warning(
                    "snapshot_store_write_failed",
                    key=key,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        return snapshot

    async def _read_durable(self, key: str) -> Snapshot | None:
        if self._store is None:
            return None
        try:
            return await self._store.get_latest(key)
        except Exception as e:
            SNAPSHOT_STORE_ERRORS.labels(operation="read").inc()
            logger.warning(
                "snapshot_store_read_failed",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    def clear_local(self) -> None:
        """Drop the local tier, as after a process restart."""
        self._local.clear()
