# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Run the API server.

Usage:
    python -m zimlearn

Exits with status 1 when a required setting (DATABASE_URL, JWT_SECRET_KEY,
SMTP_USERNAME, SMTP_PASSWORD) is missing or invalid.
"""

import logging
import sys

import uvicorn
from pydantic import ValidationError

from zimlearn.core.config import get_settings

logger = logging.getLogger("zimlearn")


def main() -> None:
    """Validate configuration and start uvicorn."""
    try:
        settings = get_settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.ERROR, stream=sys.stderr)
        logger.error("Invalid configuration: %s", str(e))
        sys.exit(1)

    uvicorn.run(
        "zimlearn.main:app",
        host=settings.api.host,
        port=settings.api.port,
        workers=settings.api.workers,
        reload=settings.api.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
