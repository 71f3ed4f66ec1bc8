# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the ZimLearn API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIASGIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from zimlearn import __version__
from zimlearn.api.dependencies import AppContainer, build_container
from zimlearn.api.middleware.auth import AuthMiddleware
from zimlearn.api.middleware.rate_limit import (
    build_limiter,
    exempt_unlimited_routes,
    rate_limit_exceeded_handler,
)
from zimlearn.api.routes import health
from zimlearn.api.routes import router as api_router
from zimlearn.core.config import Settings, get_settings
from zimlearn.infrastructure.database import DatabaseError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = "Internal server error"


async def start_container(container: AppContainer) -> None:
    """Wait for the database and prepare the schema where needed.

    SQLite databases get their tables created directly. PostgreSQL is
    migrated with Alembic before the API starts.

    Raises:
        DatabaseError: If the database stays unreachable.
    """
    await container.database.connect()
    if container.settings.database.is_sqlite:
        await container.database.create_all()
        logger.info("SQLite schema created")


def _lifespan_for(container: AppContainer | None):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager.

        Builds the container on startup unless one was supplied, and
        closes what it built on shutdown.
        """
        settings: Settings = app.state.settings
        logger.info(
            "Starting ZimLearn API (environment=%s, debug=%s)",
            settings.environment,
            settings.debug,
        )

        owned = container is None
        if owned:
            app.state.container = build_container(settings)
            try:
                await start_container(app.state.container)
            except DatabaseError:
                await app.state.container.close()
                raise

        yield

        if owned:
            await app.state.container.close()
            logger.info("Application resources released")

        logger.info("Shutting down ZimLearn API")

    return lifespan


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Report request validation failures as 400.

    Returns a readable message plus the individual errors.
    """
    errors = exc.errors()

    if len(errors) == 1:
        error = errors[0]
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        detail = f"Invalid value for '{field}': {error['msg']}" if field else error["msg"]
    else:
        detail = f"Request validation failed with {len(errors)} errors"

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": detail,
            "errors": [
                {
                    "field": ".".join(str(loc) for loc in error["loc"]),
                    "message": error["msg"],
                }
                for error in errors
            ],
        },
    )


async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Hide storage failures behind a generic 500."""
    logger.error(
        "Storage error on %s %s: %s",
        request.method,
        request.url.path,
        str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": INTERNAL_ERROR_DETAIL},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Hide unexpected failures behind a generic 500."""
    logger.error(
        "Unhandled error on %s %s: %s",
        request.method,
        request.url.path,
        str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": INTERNAL_ERROR_DETAIL},
    )


def create_app(
    settings: Settings | None = None,
    container: AppContainer | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings, loaded from the environment when
            omitted.
        container: Prebuilt container. When given, the application uses
            it as is and leaves it open on shutdown.

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = container.settings if container is not None else get_settings()

    app = FastAPI(
        title="ZimLearn API",
        description="Learning resource aggregation for Zimbabwean secondary schools",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=_lifespan_for(container),
    )

    # =========================================================================
    # State
    # =========================================================================
    app.state.settings = settings
    app.state.container = container
    app.state.limiter = build_limiter(settings)

    # =========================================================================
    # Exception handlers
    # =========================================================================
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(DatabaseError, storage_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================
    app.add_middleware(AuthMiddleware)
    app.add_middleware(SlowAPIASGIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(api_router)
    exempt_unlimited_routes(app)

    return app
