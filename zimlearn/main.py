# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ASGI entry point.

Run with:
    uvicorn zimlearn.main:app --host 0.0.0.0 --port 5000
"""

from zimlearn.api.app import create_app
from zimlearn.core.config import get_settings
from zimlearn.utils.logging import setup_logging

settings = get_settings()
setup_logging(settings)

app = create_app(settings)
