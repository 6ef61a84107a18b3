"""Dependency injection for API routes.

Provides FastAPI dependencies for the stores and services used by API
endpoints. Instances are created once per process from settings and can be
overridden for testing through ``app.dependency_overrides``.
"""

from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends, Request

from timeboard.cache.snapshot_cache import SnapshotCache
from timeboard.cache.store import SnapshotStore
from timeboard.cache.stores.inmemory import InMemorySnapshotStore
from timeboard.cache.stores.postgrest import PostgrestSnapshotStore
from timeboard.cache.stores.redis import RedisSnapshotStore
from timeboard.config import get_settings
from timeboard.config.settings import Settings
from timeboard.idempotency.guard import IdempotencyGuard
from timeboard.idempotency.store import IdempotencyStore
from timeboard.idempotency.stores.inmemory import InMemoryIdempotencyStore
from timeboard.idempotency.stores.redis import RedisIdempotencyStore
from timeboard.observability.logging import get_logger
from timeboard.snapshots.coalescing import SingleFlight
from timeboard.snapshots.orchestrator import FetchOrchestrator
from timeboard.snapshots.service import SnapshotViewService
from timeboard.snapshots.views import ViewBuilder
from timeboard.team.roster import TeamRoster
from timeboard.timers.guard import LongRunningTimerGuard
from timeboard.timers.service import TimerService
from timeboard.timers.store import TimeEntryStore
from timeboard.timers.stores.inmemory import InMemoryTimeEntryStore
from timeboard.timers.stores.redis import RedisTimeEntryStore
from timeboard.upstream.client import TogglClient

logger = get_logger(__name__)

# Redis clients keyed by URL - shared by stores pointing at the same server
_redis_clients: dict[str, redis.Redis] = {}

# Store and service instances - created once and reused
_snapshot_store: SnapshotStore | None = None
_snapshot_cache: SnapshotCache | None = None
_toggl_client: TogglClient | None = None
_team_roster: TeamRoster | None = None
_view_service: SnapshotViewService | None = None
_idempotency_store: IdempotencyStore | None = None
_idempotency_guard: IdempotencyGuard | None = None
_time_entry_store: TimeEntryStore | None = None
_timer_guard: LongRunningTimerGuard | None = None
_timer_service: TimerService | None = None


def get_redis_client(url: str) -> redis.Redis:
    """Get the shared Redis client for a URL.

    Args:
        url: Redis connection URL

    Returns:
        Redis client instance
    """
    client = _redis_clients.get(url)
    if client is None:
        client = redis.from_url(url, decode_responses=True)
        _redis_clients[url] = client
        logger.info("redis_client_created", url=url.split("@")[-1])  # Log without credentials
    return client


def get_snapshot_store(settings: Annotated[Settings, Depends(get_settings)]) -> SnapshotStore:
    """Get the durable tier of the snapshot cache.

    Falls back to InMemorySnapshotStore if the configured backend cannot
    be built.
    """
    global _snapshot_store
    if _snapshot_store is None:
        config = settings.storage.snapshots
        try:
            if config.backend == "redis":
                if not config.connection_url:
                    raise ValueError("Redis snapshot store needs connection_url")
                _snapshot_store = RedisSnapshotStore(get_redis_client(config.connection_url), config)
            elif config.backend == "postgrest":
                _snapshot_store = PostgrestSnapshotStore.from_config(config)
            else:
                _snapshot_store = InMemorySnapshotStore()
            logger.info("snapshot_store_initialized", store_type=config.backend)
        except Exception as e:
            logger.warning(
                "snapshot_store_failed_using_inmemory",
                backend=config.backend,
                error=str(e),
            )
            _snapshot_store = InMemorySnapshotStore()
            logger.info("snapshot_store_initialized", store_type="inmemory")
    return _snapshot_store


def get_snapshot_cache(store: Annotated[SnapshotStore, Depends(get_snapshot_store)]) -> SnapshotCache:
    global _snapshot_cache
    if _snapshot_cache is None:
        _snapshot_cache = SnapshotCache(store)
        logger.info("snapshot_cache_initialized")
    return _snapshot_cache


def get_toggl_client(settings: Annotated[Settings, Depends(get_settings)]) -> TogglClient:
    global _toggl_client
    if _toggl_client is None:
        _toggl_client = TogglClient(
            base_url=settings.upstream.base_url,
            timeout=settings.upstream.timeout_seconds,
        )
        logger.info("toggl_client_initialized", base_url=settings.upstream.base_url)
    return _toggl_client


def get_team_roster(settings: Annotated[Settings, Depends(get_settings)]) -> TeamRoster:
    global _team_roster
    if _team_roster is None:
        _team_roster = TeamRoster.from_config(settings.team)
        logger.info("team_roster_loaded", members=len(_team_roster))
    return _team_roster


def get_view_service(
    settings: Annotated[Settings, Depends(get_settings)],
    cache: Annotated[SnapshotCache, Depends(get_snapshot_cache)],
    client: Annotated[TogglClient, Depends(get_toggl_client)],
    roster: Annotated[TeamRoster, Depends(get_team_roster)],
) -> SnapshotViewService:
    """Get the service behind the read views.

    Refresh coalescing is enabled by ``upstream.coalesce_refreshes``.

    Args:
        settings: Application settings
        cache: Snapshot cache
        client: Upstream API client
        roster: Team roster

    Returns:
        SnapshotViewService for the read endpoints
    """
    global _view_service
    if _view_service is None:
        orchestrator = FetchOrchestrator(
            cache,
            timeout_seconds=settings.upstream.timeout_seconds,
            coalescer=SingleFlight() if settings.upstream.coalesce_refreshes else None,
        )
        _view_service = SnapshotViewService(orchestrator, ViewBuilder(client, roster), settings.cache)
        logger.info(
            "view_service_initialized",
            coalesce_refreshes=settings.upstream.coalesce_refreshes,
        )
    return _view_service


def get_idempotency_store(settings: Annotated[Settings, Depends(get_settings)]) -> IdempotencyStore:
    """Get the IdempotencyStore instance.

    Falls back to InMemoryIdempotencyStore if Redis is not configured.
    """
    global _idempotency_store
    if _idempotency_store is None:
        config = settings.storage.idempotency
        if config.backend == "redis" and config.connection_url:
            _idempotency_store = RedisIdempotencyStore(get_redis_client(config.connection_url), config)
        else:
            if config.backend == "redis":
                logger.warning("idempotency_store_redis_url_missing_using_inmemory")
            _idempotency_store = InMemoryIdempotencyStore()
        logger.info("idempotency_store_initialized", store_type=type(_idempotency_store).__name__)
    return _idempotency_store


def get_idempotency_guard(
    store: Annotated[IdempotencyStore, Depends(get_idempotency_store)],
) -> IdempotencyGuard:
    global _idempotency_guard
    if _idempotency_guard is None:
        _idempotency_guard = IdempotencyGuard(store)
    return _idempotency_guard


def get_time_entry_store(settings: Annotated[Settings, Depends(get_settings)]) -> TimeEntryStore:
    """Get the TimeEntryStore instance.

    Falls back to InMemoryTimeEntryStore if Redis is not configured.
    """
    global _time_entry_store
    if _time_entry_store is None:
        config = settings.storage.timers
        if config.backend == "redis" and config.connection_url:
            _time_entry_store = RedisTimeEntryStore(get_redis_client(config.connection_url), config)
        else:
            if config.backend == "redis":
                logger.warning("time_entry_store_redis_url_missing_using_inmemory")
            _time_entry_store = InMemoryTimeEntryStore()
        logger.info("time_entry_store_initialized", store_type=type(_time_entry_store).__name__)
    return _time_entry_store


def get_timer_guard(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[TimeEntryStore, Depends(get_time_entry_store)],
) -> LongRunningTimerGuard:
    global _timer_guard
    if _timer_guard is None:
        _timer_guard = LongRunningTimerGuard(store, settings.timers.max_running_seconds)
    return _timer_guard


def get_timer_service(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[TimeEntryStore, Depends(get_time_entry_store)],
) -> TimerService:
    global _timer_service
    if _timer_service is None:
        _timer_service = TimerService(store, settings.timers.max_entry_seconds)
    return _timer_service


def get_idempotency_token(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str | None:
    """Read the idempotency token from the first configured header present."""
    for header in settings.idempotency.header_names:
        value = request.headers.get(header)
        if value and value.strip():
            return value.strip()
    return None


async def close_dependencies() -> None:
    """Close network clients held by the singletons."""
    if _toggl_client is not None:
        await _toggl_client.close()
    if _snapshot_store is not None and not isinstance(_snapshot_store, RedisSnapshotStore):
        await _snapshot_store.close()
    for client in _redis_clients.values():
        await client.aclose()


def reset_dependencies() -> None:
    """Drop all singletons so the next request rebuilds them.

    Used by tests between cases.
    """
    global _snapshot_store, _snapshot_cache, _toggl_client, _team_roster, _view_service
    global _idempotency_store, _idempotency_guard, _time_entry_store, _timer_guard, _timer_service
    _redis_clients.clear()
    _snapshot_store = None
    _snapshot_cache = None
    _toggl_client = None
    _team_roster = None
    _view_service = None
    _idempotency_store = None
    _idempotency_guard = None
    _time_entry_store = None
    _timer_guard = None
    _timer_service = None


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
SnapshotStoreDep = Annotated[SnapshotStore, Depends(get_snapshot_store)]
SnapshotCacheDep = Annotated[SnapshotCache, Depends(get_snapshot_cache)]
TogglClientDep = Annotated[TogglClient, Depends(get_toggl_client)]
TeamRosterDep = Annotated[TeamRoster, Depends(get_team_roster)]
ViewServiceDep = Annotated[SnapshotViewService, Depends(get_view_service)]
IdempotencyStoreDep = Annotated[IdempotencyStore, Depends(get_idempotency_store)]
IdempotencyGuardDep = Annotated[IdempotencyGuard, Depends(get_idempotency_guard)]
TimeEntryStoreDep = Annotated[TimeEntryStore, Depends(get_time_entry_store)]
TimerGuardDep = Annotated[LongRunningTimerGuard, Depends(get_timer_guard)]
TimerServiceDep = Annotated[TimerService, Depends(get_timer_service)]
IdempotencyTokenDep = Annotated[str | None, Depends(get_idempotency_token)]
