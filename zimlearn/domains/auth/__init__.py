# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain: password hashing, tokens and accounts."""

from zimlearn.domains.auth.jwt import (
    InvalidTokenError,
    JWTError,
    JWTManager,
    TokenExpiredError,
    TokenPayload,
)
from zimlearn.domains.auth.password import PasswordHasher

__all__ = [
    "InvalidTokenError",
    "JWTError",
    "JWTManager",
    "PasswordHasher",
    "TokenExpiredError",
    "TokenPayload",
]
