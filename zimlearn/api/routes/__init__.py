# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API routers.

All application routes live under /api; the liveness routes are mounted
at the root.
"""

from fastapi import APIRouter

from zimlearn.api.routes import auth, resources

router = APIRouter(prefix="/api")

router.include_router(auth.router, prefix="/auth", tags=["Auth"])
router.include_router(resources.router, prefix="/resources", tags=["Resources"])

__all__ = ["router"]
