"""
FastAPI application factory and configuration.

This module creates and configures the FastAPI application with
middleware, error handling, and route registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from ...application.startup import ApplicationStartup
from ...infrastructure.config.models import ApplicationConfig
from .errors import register_exception_handlers
from .middleware import ErrorHandlerMiddleware, PreflightCORSMiddleware, RequestTimingMiddleware
from .routers import health, sessions, upload

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Components are started here only when the app built its own
    ``ApplicationStartup``; otherwise the caller owns their lifecycle.
    """
    logger.info("Application starting up...")
    startup: ApplicationStartup = app.state.startup

    if app.state.owns_startup:
        await startup.start_application()

    try:
        yield
    finally:
        if app.state.owns_startup:
            await startup.stop_application()
        logger.info("Application shutting down...")


def create_app(
    config: ApplicationConfig,
    startup: Optional[ApplicationStartup] = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration
        startup: Started components; built from ``config`` when omitted

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=config.name,
        version=config.version,
        description="Relay for resumable uploads to Google Drive",
        debug=config.debug,
        lifespan=lifespan
    )

    app.state.config = config
    app.state.owns_startup = startup is None
    app.state.startup = startup or ApplicationStartup(config)

    _configure_middleware(app, config)
    register_exception_handlers(app)
    _register_routes(app)

    logger.info(f"FastAPI application created: {config.name} v{config.version}")
    return app


def create_app_from_config() -> FastAPI:
    """
    Create app from configuration (for uvicorn reload).

    The app starts and stops its own components.
    """
    from pathlib import Path

    from ...infrastructure.config.loader import ConfigLoader

    config_file = "config.yaml" if Path("config.yaml").exists() else None
    config = ConfigLoader().load_config(config_file)
    return create_app(config)


def _configure_middleware(app: FastAPI, config: ApplicationConfig) -> None:
    """Configure application middleware. The last one added runs first."""

    app.add_middleware(ErrorHandlerMiddleware)

    app.add_middleware(RequestTimingMiddleware)

    # Outermost, so error responses carry CORS headers too
    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=config.security.allowed_origins,
        allow_credentials=True,
        allow_methods=config.security.allowed_methods,
        allow_headers=config.security.allowed_headers,
        expose_headers=["X-Request-ID"],
    )

    logger.debug("Middleware configured")


def _register_routes(app: FastAPI) -> None:
    """Register API routes."""

    app.include_router(
        health.router,
        prefix="/health",
        tags=["health"]
    )

    app.include_router(
        sessions.router,
        tags=["sessions"]
    )

    app.include_router(
        upload.router,
        tags=["upload"]
    )

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with basic application information."""
        return {
            "name": app.title,
            "version": app.version,
            "status": "running",
            "docs_url": "/docs",
            "health_url": "/health"
        }

    logger.debug("Routes registered")
