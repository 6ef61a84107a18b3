"""Fixtures wiring the FastAPI app to in-memory stores and a mocked upstream."""

from collections.abc import Generator
from dataclasses import dataclass
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from timeboard.api.app import create_app
from timeboard.api.dependencies import (
    get_idempotency_guard,
    get_idempotency_store,
    get_settings,
    get_snapshot_store,
    get_team_roster,
    get_time_entry_store,
    get_timer_guard,
    get_timer_service,
    get_toggl_client,
    get_view_service,
    reset_dependencies,
)
from timeboard.cache.snapshot_cache import SnapshotCache
from timeboard.cache.stores.inmemory import InMemorySnapshotStore
from timeboard.config.settings import Settings
from timeboard.idempotency.guard import IdempotencyGuard
from timeboard.idempotency.stores.inmemory import InMemoryIdempotencyStore
from timeboard.snapshots.orchestrator import FetchOrchestrator
from timeboard.snapshots.service import SnapshotViewService
from timeboard.snapshots.views import ViewBuilder
from timeboard.team.roster import TeamRoster
from timeboard.timers.guard import LongRunningTimerGuard
from timeboard.timers.service import TimerService
from timeboard.timers.stores.inmemory import InMemoryTimeEntryStore


@dataclass
class ApiHarness:
    """App under test plus the collaborators tests poke at."""

    app: FastAPI
    client: TestClient
    toggl: MagicMock
    snapshot_cache: SnapshotCache
    idempotency_store: InMemoryIdempotencyStore
    time_entries: InMemoryTimeEntryStore
    timers: TimerService


@pytest.fixture
def settings() -> Settings:
    """Settings with a two-member team."""
    return Settings(
        team={
            "members": [
                {"name": "Ana", "token": "tok-ana"},
                {"name": "Bo", "token": "tok-bo"},
            ]
        }
    )


@pytest.fixture
def toggl() -> MagicMock:
    """Mock upstream client with no entries and no running timer."""
    mock = MagicMock()
    mock.base_url = "https://toggl.test/api/v9"
    mock.list_entries = AsyncMock(return_value=[])
    mock.get_current_entry = AsyncMock(return_value=None)
    mock.get_project_names = AsyncMock(return_value={})
    return mock


@pytest.fixture
def api(settings: Settings, toggl: MagicMock, clock) -> Generator[ApiHarness, None, None]:
    """App with every dependency overridden."""
    reset_dependencies()

    roster = TeamRoster.from_config(settings.team)
    snapshot_store = InMemorySnapshotStore()
    cache = SnapshotCache(snapshot_store, clock=clock)
    view_service = SnapshotViewService(
        FetchOrchestrator(cache, clock=clock),
        ViewBuilder(toggl, roster, clock=clock),
        settings.cache,
    )
    idempotency_store = InMemoryIdempotencyStore(clock=clock)
    time_entries = InMemoryTimeEntryStore()
    timers = TimerService(time_entries, settings.timers.max_entry_seconds, clock=clock)

    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_team_roster] = lambda: roster
    app.dependency_overrides[get_toggl_client] = lambda: toggl
    app.dependency_overrides[get_snapshot_store] = lambda: snapshot_store
    app.dependency_overrides[get_view_service] = lambda: view_service
    app.dependency_overrides[get_idempotency_store] = lambda: idempotency_store
    app.dependency_overrides[get_idempotency_guard] = lambda: IdempotencyGuard(idempotency_store, clock=clock)
    app.dependency_overrides[get_time_entry_store] = lambda: time_entries
    app.dependency_overrides[get_timer_guard] = lambda: LongRunningTimerGuard(
        time_entries, settings.timers.max_running_seconds, clock=clock
    )
    app.dependency_overrides[get_timer_service] = lambda: timers

    yield ApiHarness(
        app=app,
        client=TestClient(app),
        toggl=toggl,
        snapshot_cache=cache,
        idempotency_store=idempotency_store,
        time_entries=time_entries,
        timers=timers,
    )

    reset_dependencies()
