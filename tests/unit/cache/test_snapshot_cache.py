"""Tests for the two-tier SnapshotCache."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from timeboard.cache.models import Snapshot
from timeboard.cache.snapshot_cache import SnapshotCache
from timeboard.cache.stores.inmemory import InMemorySnapshotStore


@pytest.fixture
def store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture
def cache(store: InMemorySnapshotStore, clock) -> SnapshotCache:
    return SnapshotCache(store, clock=clock)


class TestFreshness:
    """Fresh and any-age reads."""

    @pytest.mark.asyncio
    async def test_set_then_fresh_get_within_ttl(self, cache: SnapshotCache, clock) -> None:
        await cache.set("ana::2024-05-01", {"totalSeconds": 3600}, ttl_seconds=600)
        clock.advance(seconds=599)

        snapshot = await cache.get("ana::2024-05-01", fresh_only=True)

        assert snapshot is not None
        assert snapshot.payload == {"totalSeconds": 3600}

    @pytest.mark.asyncio
    async def test_expired_snapshot_only_served_as_any(self, cache: SnapshotCache, clock) -> None:
        await cache.set("team::2024-05-01", {"members": []}, ttl_seconds=600)
        clock.advance(seconds=601)

        assert await cache.get("team::2024-05-01", fresh_only=True) is None
        stale = await cache.get("team::2024-05-01", fresh_only=False)
        assert stale is not None
        assert stale.payload == {"members": []}

    @pytest.mark.asyncio
    async def test_expiry_boundary_is_inclusive(self, cache: SnapshotCache, clock) -> None:
        await cache.set("k", 1, ttl_seconds=10)
        clock.advance(seconds=10)
        assert await cache.get("k", fresh_only=True) is not None

    @pytest.mark.asyncio
    async def test_newer_write_supersedes(self, cache: SnapshotCache, clock) -> None:
        await cache.set("k", "old", ttl_seconds=10)
        clock.advance(seconds=60)
        await cache.set("k", "new", ttl_seconds=10)

        snapshot = await cache.get("k", fresh_only=True)
        assert snapshot is not None
        assert snapshot.payload == "new"
        assert snapshot.created_at == clock.now

    @pytest.mark.asyncio
    async def test_miss(self, cache: SnapshotCache) -> None:
        assert await cache.get("missing", fresh_only=False) is None


class TestTiers:
    """Local and durable tier interplay."""

    @pytest.mark.asyncio
    async def test_writes_through_to_durable_store(self, cache: SnapshotCache, store, clock) -> None:
        await cache.set("k", {"a": 1}, ttl_seconds=60)

        durable = await store.get_latest("k")
        assert durable is not None
        assert durable.payload == {"a": 1}
        assert durable.expires_at == clock.now + timedelta(seconds=60)

    @pytest.mark.asyncio
    async def test_durable_hit_repopulates_local_tier(self, store, clock) -> None:
        writer = SnapshotCache(store, clock=clock)
        await writer.set("k", "shared", ttl_seconds=60)

        # A second process sees the durable snapshot
        reader = SnapshotCache(store, clock=clock)
        assert (await reader.get("k", fresh_only=True)).payload == "shared"

        store.get_latest = AsyncMock(side_effect=AssertionError("durable tier should not be read"))
        assert (await reader.get("k", fresh_only=True)).payload == "shared"

    @pytest.mark.asyncio
    async def test_survives_local_tier_loss(self, cache: SnapshotCache) -> None:
        await cache.set("k", "persisted", ttl_seconds=60)
        cache.clear_local()

        assert (await cache.get("k", fresh_only=False)).payload == "persisted"

    @pytest.mark.asyncio
    async def test_stale_local_is_replaced_by_newer_durable(self, store, clock) -> None:
        local = SnapshotCache(store, clock=clock)
        await local.set("k", "mine", ttl_seconds=60)
        clock.advance(seconds=120)

        sibling = SnapshotCache(store, clock=clock)
        await sibling.set("k", "theirs", ttl_seconds=60)

        snapshot = await local.get("k", fresh_only=True)
        assert snapshot is not None
        assert snapshot.payload == "theirs"

    @pytest.mark.asyncio
    async def test_local_only_cache(self, clock) -> None:
        cache = SnapshotCache(None, clock=clock)
        await cache.set("k", "v", ttl_seconds=5)
        assert (await cache.get("k", fresh_only=True)).payload == "v"


class TestStoreFailures:
    """Durable store errors never reach the caller."""

    @pytest.mark.asyncio
    async def test_read_failure_is_a_miss(self, clock) -> None:
        store = AsyncMock()
        store.get_latest.side_effect = ConnectionError("down")
        cache = SnapshotCache(store, clock=clock)

        assert await cache.get("k", fresh_only=False) is None

    @pytest.mark.asyncio
    async def test_read_failure_still_serves_local(self, clock) -> None:
        store = AsyncMock()
        cache = SnapshotCache(store, clock=clock)
        await cache.set("k", "local", ttl_seconds=1)
        clock.advance(seconds=5)
        store.get_latest.side_effect = ConnectionError("down")

        assert await cache.get("k", fresh_only=True) is None
        assert (await cache.get("k", fresh_only=False)).payload == "local"

    @pytest.mark.asyncio
    async def test_write_failure_keeps_local_write(self, clock) -> None:
        store = AsyncMock()
        store.upsert.side_effect = TimeoutError("slow")
        store.get_latest.return_value = None
        cache = SnapshotCache(store, clock=clock)

        snapshot = await cache.set("k", "v", ttl_seconds=60)

        assert isinstance(snapshot, Snapshot)
        assert (await cache.get("k", fresh_only=True)).payload == "v"

    @pytest.mark.asyncio
    async def test_offsetless_durable_timestamps_compare_with_local(self, clock) -> None:
        store = AsyncMock()
        cache = SnapshotCache(store, clock=clock)
        await cache.set("k", "local", ttl_seconds=60)
        clock.advance(seconds=120)
        naive_expiry = (clock() + timedelta(minutes=5)).replace(tzinfo=None)
        store.get_latest.return_value = Snapshot(
            key="k",
            payload="durable",
            created_at=datetime(2024, 5, 1, 12, 0),
            expires_at=naive_expiry,
        )

        snapshot = await cache.get("k", fresh_only=True)

        assert snapshot is not None
        assert snapshot.payload == "durable"
