"""Logging context middleware for observability.

Binds request_id, member and trace_id to structlog contextvars for the
duration of each request and records request metrics.
"""

import time
from collections.abc import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from structlog.contextvars import bind_contextvars, clear_contextvars

from timeboard.observability.logging import get_logger
from timeboard.observability.metrics import REQUEST_COUNT, REQUEST_LATENCY

logger = get_logger(__name__)


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """Middleware that binds request context to structlog contextvars.

    Headers:
        X-Request-ID: Caller supplied request identifier (generated if absent)
        X-Trace-ID: Distributed trace identifier
        traceparent: W3C trace context (fallback for trace_id)

    The ``member`` query parameter, when present, is bound as well so cache
    and upstream logs can be correlated to the member being viewed.
    """

    async def dispatch(  # type: ignore[override]
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        """Process request and bind logging context."""
        clear_contextvars()

        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        trace_id = request.headers.get("X-Trace-ID") or self._extract_trace_id(
            request.headers.get("traceparent")
        )

        bind_contextvars(
            request_id=request_id,
            member=request.query_params.get("member"),
            trace_id=trace_id,
        )

        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)  # type: ignore[misc]
            status_code = response.status_code
        except Exception as e:
            logger.exception(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
            )
            raise
        finally:
            elapsed = time.perf_counter() - start
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=request.url.path,
                status=str(status_code),
            ).inc()
            REQUEST_LATENCY.labels(
                method=request.method,
                endpoint=request.url.path,
            ).observe(elapsed)

        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            latency_ms=round(elapsed * 1000, 2),
        )

        response.headers["X-Request-ID"] = request_id
        return response  # type: ignore[no-any-return]

    @staticmethod
    def _extract_trace_id(traceparent: str | None) -> str | None:
        """Extract trace_id from W3C traceparent header.

        Format: version-trace_id-parent_id-trace_flags
        Example: 00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01
        """
        if not traceparent:
            return None
        parts = traceparent.split("-")
        return parts[1] if len(parts) >= 2 else None
