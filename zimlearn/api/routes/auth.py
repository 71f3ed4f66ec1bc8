# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account API endpoints.

This module provides endpoints for user accounts:
- POST /register - Create an unverified account and email a code
- POST /verify-email - Confirm the account with the emailed code
- POST /login - Issue an access token
- POST /resend-verification - Email a fresh code
- GET /profile (alias /me) - Get the current user

Example:
    POST /api/auth/register
    {"name": "Tariro", "email": "tariro@example.co.zw", "password": "secret1"}

    POST /api/auth/verify-email
    {"email": "tariro@example.co.zw", "code": "048213"}

    POST /api/auth/login
    {"email": "tariro@example.co.zw", "password": "secret1"}
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from zimlearn.api.dependencies import get_account_service, require_auth
from zimlearn.api.middleware.auth import CurrentUser
from zimlearn.domains.auth.service import (
    AccountService,
    AlreadyVerifiedError,
    EmailAlreadyRegisteredError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
    InvalidVerificationCodeError,
    UserNotFoundError,
    VerificationDeliveryError,
)
from zimlearn.infrastructure.database.models import User
from zimlearn.models.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    ResendVerificationRequest,
    UserResponse,
    VerifyEmailRequest,
)
from zimlearn.models.common import MessageResponse
from zimlearn.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)

router = APIRouter()


def _user_response(user: User) -> UserResponse:
    """Project a user without password hash or verification code."""
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        is_verified=user.is_verified,
        created_at=ensure_utc(user.created_at) if user.created_at else None,
    )


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
)
async def register(
    data: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
) -> RegisterResponse:
    """Create an unverified account and email its verification code.

    No token is returned; the client verifies the email and then logs in.

    Raises:
        HTTPException: 400 if the email is already registered.
    """
    try:
        user = await accounts.register(data.name, data.email, data.password)
    except EmailAlreadyRegisteredError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return RegisterResponse(
        message="Registration successful. Please check your email for the verification code.",
        user=_user_response(user),
    )


@router.post(
    "/verify-email",
    response_model=MessageResponse,
    summary="Verify an email address",
)
async def verify_email(
    data: VerifyEmailRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Confirm an account with its emailed code.

    Raises:
        HTTPException: 404 if no account has the email, 400 if it is
            already verified or the code is wrong.
    """
    try:
        await accounts.verify_email(data.email, data.code)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (AlreadyVerifiedError, InvalidVerificationCodeError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return MessageResponse(message="Email verified successfully")


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
)
async def login(
    data: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> LoginResponse:
    """Authenticate with email and password.

    Raises:
        HTTPException: 401 for wrong credentials, 400 if the email is not
            verified yet.
    """
    try:
        result = await accounts.login(data.email, data.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    except EmailNotVerifiedError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return LoginResponse(
        token=result.token,
        expires_in=result.expires_in,
        user=_user_response(result.user),
    )


@router.post(
    "/resend-verification",
    response_model=MessageResponse,
    summary="Resend the verification code",
)
async def resend_verification(
    data: ResendVerificationRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Issue and email a fresh verification code.

    Raises:
        HTTPException: 404 if no account has the email, 400 if it is
            already verified, 500 if the email could not be sent.
    """
    try:
        await accounts.resend_verification(data.email)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AlreadyVerifiedError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except VerificationDeliveryError as e:
        logger.error("Resend verification failed: %s", str(e.__cause__ or e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send verification code",
        )

    return MessageResponse(message="Verification code sent")


@router.get(
    "/profile",
    response_model=UserResponse,
    summary="Get the current user",
)
@router.get(
    "/me",
    response_model=UserResponse,
    include_in_schema=False,
)
async def get_profile(
    current_user: CurrentUser = Depends(require_auth),
    accounts: AccountService = Depends(get_account_service),
) -> UserResponse:
    """Get the authenticated user's account.

    Raises:
        HTTPException: 404 if the account no longer exists.
    """
    try:
        user = await accounts.get_profile(current_user.id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return _user_response(user)
