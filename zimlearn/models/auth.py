# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account API schemas."""

from datetime import datetime

from pydantic import EmailStr, Field

from zimlearn.models.common import RequestModel, ResponseModel, UserRole


class RegisterRequest(RequestModel):
    """New account registration."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class VerifyEmailRequest(RequestModel):
    """Email verification with the emailed code."""

    email: EmailStr
    code: str = Field(..., pattern=r"^[0-9]{6}$", description="6-digit verification code")


class LoginRequest(RequestModel):
    """Credentials for login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class ResendVerificationRequest(RequestModel):
    """Request a fresh verification code."""

    email: EmailStr


class UserResponse(ResponseModel):
    """Public view of an account."""

    id: str
    name: str
    email: str
    role: UserRole
    is_verified: bool
    created_at: datetime | None = None


class RegisterResponse(ResponseModel):
    """Registration acknowledgement."""

    message: str
    user: UserResponse


class LoginResponse(ResponseModel):
    """Issued access token and the authenticated user."""

    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserResponse
