# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP middleware."""

from zimlearn.api.middleware.auth import AuthMiddleware, CurrentUser, get_current_user
from zimlearn.api.middleware.rate_limit import (
    RATE_LIMIT_AUTH,
    RATE_LIMITED_PATHS,
    build_limiter,
    exempt_unlimited_routes,
)

__all__ = [
    "AuthMiddleware",
    "CurrentUser",
    "get_current_user",
    "RATE_LIMIT_AUTH",
    "RATE_LIMITED_PATHS",
    "build_limiter",
    "exempt_unlimited_routes",
]
