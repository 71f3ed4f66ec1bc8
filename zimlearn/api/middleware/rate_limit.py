# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rate limiting using slowapi.

Only the public auth endpoints are limited, per client IP. Each
application gets its own Limiter with in-memory counters, built by
create_app() and enforced by SlowAPIASGIMiddleware through
app.state.limiter.

Example:
    app.state.limiter = build_limiter(settings)
    app.add_middleware(SlowAPIASGIMiddleware)
    exempt_unlimited_routes(app)
"""

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

if TYPE_CHECKING:
    from zimlearn.core.config.settings import Settings

logger = logging.getLogger(__name__)

RATE_LIMIT_AUTH = "20/minute"

RATE_LIMITED_PATHS = frozenset({
    "/api/auth/register",
    "/api/auth/verify-email",
    "/api/auth/login",
    "/api/auth/resend-verification",
})


def build_limiter(settings: "Settings") -> Limiter:
    """Create a limiter applying RATE_LIMIT_AUTH to every route it checks.

    Args:
        settings: Application settings; rate_limit.enabled switches it.

    Returns:
        A Limiter with its own in-memory storage.
    """
    return Limiter(
        key_func=get_remote_address,
        default_limits=[RATE_LIMIT_AUTH],
        storage_uri="memory://",
        enabled=settings.rate_limit.enabled,
    )


def exempt_unlimited_routes(app: FastAPI) -> None:
    """Exempt every route outside RATE_LIMITED_PATHS from app.state.limiter.

    Must run after all routers are included.
    """
    limiter: Limiter = app.state.limiter
    for route in app.routes:
        endpoint = getattr(route, "endpoint", None)
        if endpoint is not None and getattr(route, "path", None) not in RATE_LIMITED_PATHS:
            limiter.exempt(endpoint)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Return 429 with a Retry-After hint.

    Args:
        request: HTTP request.
        exc: Rate limit exceeded exception.

    Returns:
        JSON response with error details.
    """
    logger.warning(
        "Rate limit exceeded: %s for %s",
        exc.detail,
        get_remote_address(request),
    )

    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Please try again later."},
        headers={"Retry-After": "60"},
    )
