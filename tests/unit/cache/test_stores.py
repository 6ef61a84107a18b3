"""Tests for SnapshotStore implementations."""

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import httpx
import pytest

from timeboard.cache.models import Snapshot
from timeboard.cache.stores.inmemory import InMemorySnapshotStore
from timeboard.cache.stores.postgrest import PostgrestSnapshotStore
from timeboard.cache.stores.redis import RedisSnapshotStore
from timeboard.config.models.storage import SnapshotStoreConfig

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _snapshot(key: str = "team::2024-05-01", payload=None) -> Snapshot:
    return Snapshot(
        key=key,
        payload=payload if payload is not None else {"date": "2024-05-01", "members": []},
        created_at=NOW,
        expires_at=NOW + timedelta(minutes=10),
    )


class TestInMemorySnapshotStore:
    @pytest.mark.asyncio
    async def test_upsert_replaces_by_key(self) -> None:
        store = InMemorySnapshotStore()
        await store.upsert(_snapshot(payload={"v": 1}))
        await store.upsert(_snapshot(payload={"v": 2}))

        latest = await store.get_latest("team::2024-05-01")
        assert latest is not None
        assert latest.payload == {"v": 2}

    @pytest.mark.asyncio
    async def test_missing_key(self) -> None:
        assert await InMemorySnapshotStore().get_latest("nope") is None


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Create mock Redis client."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    return redis


class TestRedisSnapshotStore:
    """Tests for RedisSnapshotStore."""

    @pytest.mark.asyncio
    async def test_upsert_writes_json_under_prefixed_key(self, mock_redis: AsyncMock) -> None:
        store = RedisSnapshotStore(mock_redis)

        await store.upsert(_snapshot())

        key, value = mock_redis.set.call_args.args
        assert key == "snapshot:team::2024-05-01"
        assert json.loads(value)["payload"] == {"date": "2024-05-01", "members": []}
        assert mock_redis.set.call_args.kwargs["ex"] is None

    @pytest.mark.asyncio
    async def test_retention_sets_expiry(self, mock_redis: AsyncMock) -> None:
        config = SnapshotStoreConfig(backend="redis", key_prefix="tb", retention_seconds=86400)
        store = RedisSnapshotStore(mock_redis, config)

        await store.upsert(_snapshot())

        assert mock_redis.set.call_args.args[0] == "tb:team::2024-05-01"
        assert mock_redis.set.call_args.kwargs["ex"] == 86400

    @pytest.mark.asyncio
    async def test_get_latest_round_trips(self, mock_redis: AsyncMock) -> None:
        mock_redis.get.return_value = _snapshot().model_dump_json()
        store = RedisSnapshotStore(mock_redis)

        assert await store.get_latest("team::2024-05-01") == _snapshot()
        mock_redis.get.assert_awaited_once_with("snapshot:team::2024-05-01")

    @pytest.mark.asyncio
    async def test_get_latest_missing(self, mock_redis: AsyncMock) -> None:
        assert await RedisSnapshotStore(mock_redis).get_latest("k") is None

    @pytest.mark.asyncio
    async def test_errors_propagate(self, mock_redis: AsyncMock) -> None:
        mock_redis.get.side_effect = ConnectionError("refused")
        with pytest.raises(ConnectionError):
            await RedisSnapshotStore(mock_redis).get_latest("k")


class TestPostgrestSnapshotStore:
    """Tests for PostgrestSnapshotStore against a mocked PostgREST."""

    @staticmethod
    def _store(handler) -> PostgrestSnapshotStore:
        client = httpx.AsyncClient(base_url="https://db.test/rest/v1", transport=httpx.MockTransport(handler))
        return PostgrestSnapshotStore(client, clock=lambda: NOW)

    @pytest.mark.asyncio
    async def test_get_latest_queries_newest_row(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json=[
                    {
                        "payload": {"members": []},
                        "expires_at": "2024-05-01T12:10:00+00:00",
                        "updated_at": "2024-05-01T12:00:00+00:00",
                    }
                ],
            )

        snapshot = await self._store(handler).get_latest("team::2024-05-01")

        params = seen[0].url.params
        assert seen[0].url.path == "/rest/v1/cache_snapshots"
        assert params["cache_key"] == "eq.team::2024-05-01"
        assert params["order"] == "updated_at.desc"
        assert params["limit"] == "1"
        assert snapshot is not None
        assert snapshot.payload == {"members": []}
        assert snapshot.expires_at == NOW + timedelta(minutes=10)

    @pytest.mark.asyncio
    async def test_offsetless_timestamps_are_utc(self) -> None:
        row = {"payload": {}, "expires_at": "2024-05-01T12:10:00", "updated_at": "2024-05-01T12:00:00"}
        store = self._store(lambda request: httpx.Response(200, json=[row]))

        snapshot = await store.get_latest("k")

        assert snapshot.expires_at == NOW + timedelta(minutes=10)
        assert snapshot.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_latest_empty(self) -> None:
        store = self._store(lambda request: httpx.Response(200, json=[]))
        assert await store.get_latest("k") is None

    @pytest.mark.asyncio
    async def test_upsert_merges_duplicates(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201)

        await self._store(handler).upsert(_snapshot())

        request = seen[0]
        assert request.method == "POST"
        assert "resolution=merge-duplicates" in request.headers["Prefer"]
        row = json.loads(request.content)[0]
        assert row["cache_key"] == "team::2024-05-01"
        assert row["updated_at"] == NOW.isoformat()

    @pytest.mark.asyncio
    async def test_http_errors_propagate(self) -> None:
        store = self._store(lambda request: httpx.Response(503))
        with pytest.raises(httpx.HTTPStatusError):
            await store.get_latest("k")

    def test_from_config_requires_credentials(self) -> None:
        with pytest.raises(ValueError):
            PostgrestSnapshotStore.from_config(SnapshotStoreConfig(backend="postgrest"))
