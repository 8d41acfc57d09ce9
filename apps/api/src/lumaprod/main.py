"""
FastAPI application entry point.

This module initializes the FastAPI application with all middleware,
exception handlers, and routers.
"""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lumaprod import __version__
from lumaprod.api.v1 import api_router
from lumaprod.core.config import get_settings
from lumaprod.core.exceptions import LumaProdException
from lumaprod.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown events for the application.
    """
    # Startup
    settings = get_settings()
    configure_logging()
    logger.info(f"Starting {settings.app_name} v{__version__} in {settings.environment} mode")
    if not settings.heygen_callback_url:
        logger.warning("PLATFORM_BASE_URL is not set; HeyGen jobs will rely on the reconcile sweep")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Daily devotional content production pipeline",
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_exception_handlers(app)
    register_middleware(app)

    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint returning API information."""
        return {
            "name": settings.app_name,
            "version": __version__,
            "docs": "/docs",
        }

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(LumaProdException)
    async def lumaprod_exception_handler(
        request: Request,
        exc: LumaProdException,
    ) -> JSONResponse:
        """Map application errors to their HTTP status."""
        if exc.status_code >= 500:
            logger.error(
                f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
                extra={"error_code": exc.code, "details": exc.details},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        settings = get_settings()

        logger.exception(
            f"Unhandled exception on {request.method} {request.url.path}",
            exc_info=exc,
        )

        # In development, include the error details
        if settings.is_development:
            details = {"error_type": type(exc).__name__, "error": str(exc)}
        else:
            details = {}

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "details": details,
                }
            },
        )


def register_middleware(app: FastAPI) -> None:
    """
    Register application middleware.

    Args:
        app: FastAPI application instance
    """

    @app.middleware("http")
    async def add_request_id(request: Request, call_next: Any) -> Any:
        """Add unique request ID to each request."""
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response

    @app.middleware("http")
    async def add_process_time(request: Request, call_next: Any) -> Any:
        """Add processing time header to response."""
        start_time = datetime.now(UTC)
        response = await call_next(request)
        process_time = (datetime.now(UTC) - start_time).total_seconds()
        response.headers["X-Process-Time"] = str(process_time)
        return response


# Create the application instance
app = create_app()
