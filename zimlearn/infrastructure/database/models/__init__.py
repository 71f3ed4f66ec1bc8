# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models for ZimLearn."""

from zimlearn.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from zimlearn.infrastructure.database.models.resource import Resource, ResourceTag
from zimlearn.infrastructure.database.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "Resource",
    "ResourceTag",
    "User",
]
