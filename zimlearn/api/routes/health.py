# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints."""

import logging
import time
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from zimlearn import __version__
from zimlearn.api.dependencies import AppContainer, get_container
from zimlearn.utils.datetime import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()


class RootResponse(BaseModel):
    """Liveness banner."""
    message: str
    version: str


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="healthy when the database answers, degraded otherwise")
    database: str = Field(description="Database status")
    latency_ms: float | None = Field(None, description="Database round trip in ms")
    environment: str
    version: str
    timestamp: datetime


@router.get("/", response_model=RootResponse)
async def root() -> RootResponse:
    """Report that the API process is up."""
    return RootResponse(message="ZimLearn API is running", version=__version__)


@router.get("/health", response_model=HealthResponse)
async def health(container: AppContainer = Depends(get_container)) -> HealthResponse:
    """Report process and database health."""
    start = time.perf_counter()
    database_ok = await container.database.check_connection()
    latency = (time.perf_counter() - start) * 1000

    if not database_ok:
        logger.error("Database health check failed")

    return HealthResponse(
        status="healthy" if database_ok else "degraded",
        database="healthy" if database_ok else "unhealthy",
        latency_ms=round(latency, 2) if database_ok else None,
        environment=container.settings.environment,
        version=__version__,
        timestamp=utc_now(),
    )
