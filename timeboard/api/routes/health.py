"""Health check and metrics endpoints."""

import time
from datetime import UTC, datetime

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from timeboard import __version__
from timeboard.api.dependencies import (
    IdempotencyStoreDep,
    SnapshotStoreDep,
    TeamRosterDep,
    TimeEntryStoreDep,
    TogglClientDep,
)
from timeboard.api.models.health import ComponentHealth, HealthResponse, HealthStatus
from timeboard.cache.store import SnapshotStore
from timeboard.cache.stores.inmemory import InMemorySnapshotStore
from timeboard.idempotency.store import IdempotencyStore
from timeboard.observability.logging import get_logger
from timeboard.timers.store import TimeEntryStore

logger = get_logger(__name__)

router = APIRouter()
metrics_router = APIRouter()

HEALTH_CHECK_KEY = "__health__"


async def _check_snapshot_store(store: SnapshotStore) -> ComponentHealth:
    """Check the durable snapshot tier with a read.

    A failing durable tier only degrades the service: reads still fall back
    to the in-process tier and the upstream.
    """
    start = time.time()
    try:
        await store.get_latest(HEALTH_CHECK_KEY)
    except Exception as e:
        return ComponentHealth(
            name="snapshot_store",
            status="degraded",
            latency_ms=(time.time() - start) * 1000,
            message=str(e),
        )
    return ComponentHealth(
        name="snapshot_store",
        status="healthy",
        latency_ms=(time.time() - start) * 1000,
        message="in-process only" if isinstance(store, InMemorySnapshotStore) else None,
    )


async def _check_idempotency_store(store: IdempotencyStore) -> ComponentHealth:
    start = time.time()
    try:
        await store.get(HEALTH_CHECK_KEY, HEALTH_CHECK_KEY, HEALTH_CHECK_KEY)
    except Exception as e:
        return ComponentHealth(
            name="idempotency_store",
            status="degraded",
            latency_ms=(time.time() - start) * 1000,
            message=str(e),
        )
    return ComponentHealth(
        name="idempotency_store",
        status="healthy",
        latency_ms=(time.time() - start) * 1000,
    )


async def _check_time_entry_store(store: TimeEntryStore) -> ComponentHealth:
    start = time.time()
    try:
        await store.list_running([])
    except Exception as e:
        return ComponentHealth(name="time_entry_store", status="unhealthy", message=str(e))
    return ComponentHealth(
        name="time_entry_store",
        status="healthy",
        latency_ms=(time.time() - start) * 1000,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(
    snapshot_store: SnapshotStoreDep,
    idempotency_store: IdempotencyStoreDep,
    time_entry_store: TimeEntryStoreDep,
    client: TogglClientDep,
    roster: TeamRosterDep,
) -> HealthResponse:
    """Check service health status.

    Returns the overall health status of the service along with
    the status of individual components. The upstream API itself is not
    called so health checks never spend quota.

    Args:
        snapshot_store: Durable snapshot tier
        idempotency_store: Idempotency record store
        time_entry_store: Time entry store
        client: Upstream API client
        roster: Team roster

    Returns:
        HealthResponse with status and component health
    """
    logger.debug("health_check_request")

    components = [
        await _check_snapshot_store(snapshot_store),
        await _check_idempotency_store(idempotency_store),
        await _check_time_entry_store(time_entry_store),
        ComponentHealth(
            name="upstream",
            status="healthy" if len(roster) > 0 else "degraded",
            message=client.base_url if len(roster) > 0 else "no team members configured",
        ),
    ]

    # Determine overall status
    unhealthy_count = sum(1 for c in components if c.status == "unhealthy")
    degraded_count = sum(1 for c in components if c.status == "degraded")

    overall_status: HealthStatus
    if unhealthy_count > 0:
        overall_status = "unhealthy"
    elif degraded_count > 0:
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    logger.debug("health_check_completed", status=overall_status)

    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        timestamp=datetime.now(UTC),
    )


@metrics_router.get("/metrics")
async def get_metrics() -> Response:
    """Get Prometheus metrics.

    Returns metrics in Prometheus text format for scraping.

    Returns:
        Prometheus metrics as text/plain
    """
    logger.debug("metrics_request")

    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
