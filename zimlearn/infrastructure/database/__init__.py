# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for ZimLearn."""

from zimlearn.infrastructure.database.connection import (
    Database,
    DatabaseError,
    create_engine_from_settings,
)

__all__ = ["Database", "DatabaseError", "create_engine_from_settings"]
