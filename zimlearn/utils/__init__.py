# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared utilities for ZimLearn."""

from zimlearn.utils.datetime import utc_now
from zimlearn.utils.logging import (
    bind_request_context,
    bind_user,
    clear_request_context,
    get_logger,
    setup_logging,
)

__all__ = [
    "bind_request_context",
    "bind_user",
    "clear_request_context",
    "get_logger",
    "setup_logging",
    "utc_now",
]
