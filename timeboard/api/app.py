"""FastAPI application factory.

Creates and configures the FastAPI application with middleware,
exception handlers, and route registration.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from timeboard import __version__
from timeboard.api.dependencies import close_dependencies
from timeboard.api.exceptions import TimeboardAPIError, from_timer_error, from_upstream_error
from timeboard.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from timeboard.api.routes import register_routes
from timeboard.config import get_settings
from timeboard.observability.logging import get_logger, setup_logging
from timeboard.observability.middleware import LoggingContextMiddleware
from timeboard.timers.errors import TimerError
from timeboard.upstream.errors import UpstreamError

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield
    await close_dependencies()
    logger.info("app_shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a fully configured FastAPI app with:
    - Structured logging configured from settings
    - CORS middleware
    - Logging context middleware
    - Global exception handlers
    - All API routes registered

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )

    app = FastAPI(
        title="Timeboard API",
        description="Team time-tracking dashboard backed by cached upstream snapshots",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(LoggingContextMiddleware)

    _register_exception_handlers(app)
    register_routes(app, metrics_enabled=settings.observability.metrics_enabled)

    logger.info(
        "app_created",
        debug=settings.debug,
        cors_origins=settings.api.cors_origins,
        team_size=len(settings.team.members),
    )

    return app


def _error_response(exc: TimeboardAPIError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_content(),
        headers=exc.headers or None,
    )


def _validation_details(errors: list) -> list[ErrorDetail]:
    details = []
    for error in errors:
        field = ".".join(str(loc) for loc in error["loc"])
        details.append(ErrorDetail(field=field, message=error["msg"]))
    return details


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application
    """

    @app.exception_handler(TimeboardAPIError)
    async def timeboard_api_error_handler(request: Request, exc: TimeboardAPIError) -> JSONResponse:
        """Handle TimeboardAPIError and its subclasses."""
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(exc)

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        """Handle upstream failures that had no cached fallback."""
        api_error = from_upstream_error(exc)
        logger.warning(
            "upstream_error_propagated",
            kind=exc.kind.value,
            upstream_status=exc.status_code,
            status_code=api_error.status_code,
            path=request.url.path,
        )
        return _error_response(api_error)

    @app.exception_handler(TimerError)
    async def timer_error_handler(request: Request, exc: TimerError) -> JSONResponse:
        api_error = from_timer_error(exc)
        logger.info(
            "timer_rule_violation",
            error_type=type(exc).__name__,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(api_error)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle FastAPI request validation errors."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
        )
        response = ErrorResponse(
            error=ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Request validation failed",
                details=_validation_details(exc.errors()),
            )
        )
        return JSONResponse(status_code=400, content=response.to_content())

    @app.exception_handler(ValidationError)
    async def pydantic_validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        """Handle Pydantic validation errors."""
        logger.warning(
            "pydantic_validation_error",
            errors=exc.errors(),
            path=request.url.path,
        )
        response = ErrorResponse(
            error=ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Data validation failed",
                details=_validation_details(exc.errors()),
            )
        )
        return JSONResponse(status_code=400, content=response.to_content())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        response = ErrorResponse(
            error=ErrorBody(
                code=ErrorCode.INTERNAL_ERROR,
                message="An unexpected error occurred",
            )
        )
        return JSONResponse(status_code=500, content=response.to_content())

    logger.debug("exception_handlers_registered")


# Create the app instance for uvicorn
app = create_app()
