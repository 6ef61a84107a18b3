"""API route registration.

This module provides helper functions for registering API routers
with the FastAPI application.
"""

from fastapi import APIRouter, FastAPI

from timeboard.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all routes.

    Returns:
        APIRouter with all v1 routes registered
    """
    router = APIRouter(prefix="/v1")

    from timeboard.api.routes.entries import router as entries_router
    from timeboard.api.routes.team import router as team_router
    from timeboard.api.routes.timers import router as timers_router

    router.include_router(entries_router, tags=["Entries"])
    router.include_router(team_router, tags=["Team"])
    router.include_router(timers_router, tags=["Timers"])

    logger.debug("v1_router_created", routes=["entries", "team", "time-entries"])

    return router


def register_routes(app: FastAPI, metrics_enabled: bool = True) -> None:
    """Register all routes with the FastAPI application.

    Args:
        app: FastAPI application instance
        metrics_enabled: Expose the Prometheus ``/metrics`` endpoint
    """
    app.include_router(create_v1_router())

    # Register health routes at root level
    from timeboard.api.routes.health import metrics_router
    from timeboard.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])
    if metrics_enabled:
        app.include_router(metrics_router, tags=["Health"])

    logger.info("routes_registered", metrics_enabled=metrics_enabled)
