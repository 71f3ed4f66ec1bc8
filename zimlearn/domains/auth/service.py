# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Account service for registration, email verification and login.

A user is created unverified with a 6-digit code sent by email. Login is
refused until the code has been confirmed. Successful login issues a
short-lived access token.

Example:
    >>> service = AccountService(db, password_hasher, jwt_manager, mailer)
    >>> user = await service.register("Tariro", "tariro@example.co.zw", "secret1")
    >>> await service.verify_email("tariro@example.co.zw", "123456")
    >>> result = await service.login("tariro@example.co.zw", "secret1")
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zimlearn.domains.auth.jwt import JWTManager
from zimlearn.domains.auth.password import PasswordHasher
from zimlearn.infrastructure.database.models import User
from zimlearn.infrastructure.notifications import EmailDeliveryError

logger = logging.getLogger(__name__)

VERIFICATION_CODE_DIGITS = 6


class VerificationMailer(Protocol):
    """Anything that can deliver a verification code."""

    async def send_verification_code(self, to_email: str, name: str, code: str) -> str:
        ...


class AccountError(Exception):
    """Base exception for account operations."""

    pass


class EmailAlreadyRegisteredError(AccountError):
    """Raised when registering an email that already has an account."""

    pass


class UserNotFoundError(AccountError):
    """Raised when no account matches the given email or id."""

    pass


class AlreadyVerifiedError(AccountError):
    """Raised when verifying an account that is already verified."""

    pass


class InvalidVerificationCodeError(AccountError):
    """Raised when the supplied code does not match the stored one."""

    pass


class InvalidCredentialsError(AccountError):
    """Raised when login credentials do not match an account."""

    pass


class EmailNotVerifiedError(AccountError):
    """Raised when an unverified account attempts to log in."""

    pass


class VerificationDeliveryError(AccountError):
    """Raised when a resent verification code could not be emailed."""

    pass


@dataclass
class LoginResult:
    """Issued token together with the authenticated user."""

    token: str
    expires_in: int
    user: User


def generate_verification_code() -> str:
    """Generate a uniformly random 6-digit code.

    Returns:
        Zero-padded numeric string, for example "004821".
    """
    return f"{secrets.randbelow(10 ** VERIFICATION_CODE_DIGITS):0{VERIFICATION_CODE_DIGITS}d}"


def normalize_email(email: str) -> str:
    """Normalize an email address for storage and lookup."""
    return email.strip().lower()


class AccountService:
    """Service for user accounts.

    Attributes:
        _db: Database session for queries.
        _password_hasher: bcrypt password hasher.
        _jwt_manager: JWT token manager.
        _mailer: Verification code sender.
    """

    def __init__(
        self,
        db: AsyncSession,
        password_hasher: PasswordHasher,
        jwt_manager: JWTManager,
        mailer: VerificationMailer,
    ) -> None:
        """Initialize the account service.

        Args:
            db: Async database session.
            password_hasher: Password hasher.
            jwt_manager: JWT token manager.
            mailer: Verification code sender.
        """
        self._db = db
        self._password_hasher = password_hasher
        self._jwt_manager = jwt_manager
        self._mailer = mailer

    async def register(self, name: str, email: str, password: str) -> User:
        """Create an unverified account and email its verification code.

        A failed email is logged but does not undo the registration; the
        user can ask for the code again.

        Args:
            name: Display name.
            email: Email address.
            password: Plain text password.

        Returns:
            The created user.

        Raises:
            EmailAlreadyRegisteredError: If the email is taken.
        """
        email = normalize_email(email)

        if await self._get_by_email(email) is not None:
            raise EmailAlreadyRegisteredError("User already exists")

        code = generate_verification_code()
        user = User(
            name=name,
            email=email,
            password_hash=self._password_hasher.hash(password),
            verification_code=code,
            is_verified=False,
        )
        self._db.add(user)

        try:
            await self._db.commit()
        except IntegrityError:
            await self._db.rollback()
            raise EmailAlreadyRegisteredError("User already exists")

        logger.info("Registered user: %s", user.id)

        try:
            await self._mailer.send_verification_code(user.email, user.name, code)
        except EmailDeliveryError as e:
            logger.warning("Verification email not sent to user %s: %s", user.id, str(e))

        return user

    async def verify_email(self, email: str, code: str) -> User:
        """Confirm an account with its emailed code.

        Args:
            email: Email address.
            code: 6-digit code.

        Returns:
            The verified user.

        Raises:
            UserNotFoundError: If no account has this email.
            AlreadyVerifiedError: If the account is already verified.
            InvalidVerificationCodeError: If the code does not match.
        """
        user = await self._require_by_email(email)

        if user.is_verified:
            raise AlreadyVerifiedError("Email already verified")

        if not user.verification_code or not secrets.compare_digest(
            user.verification_code.encode(), code.encode()
        ):
            raise InvalidVerificationCodeError("Invalid verification code")

        user.is_verified = True
        user.verification_code = None
        await self._db.commit()

        logger.info("Verified email for user: %s", user.id)
        return user

    async def login(self, email: str, password: str) -> LoginResult:
        """Authenticate and issue an access token.

        Args:
            email: Email address.
            password: Plain text password.

        Returns:
            LoginResult with the token and user.

        Raises:
            InvalidCredentialsError: If the email or password is wrong.
            EmailNotVerifiedError: If the account is not verified yet.
        """
        user = await self._get_by_email(normalize_email(email))

        if user is None or not self._password_hasher.verify(password, user.password_hash):
            logger.debug("Failed login for %s", normalize_email(email))
            raise InvalidCredentialsError("Invalid credentials")

        if not user.is_verified:
            raise EmailNotVerifiedError("Please verify your email")

        token = self._jwt_manager.create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
        )

        logger.info("User logged in: %s", user.id)
        return LoginResult(token=token, expires_in=self._jwt_manager.expires_in, user=user)

    async def resend_verification(self, email: str) -> None:
        """Issue and email a fresh verification code.

        The previous code stops working.

        Args:
            email: Email address.

        Raises:
            UserNotFoundError: If no account has this email.
            AlreadyVerifiedError: If the account is already verified.
            VerificationDeliveryError: If the email could not be sent.
        """
        user = await self._require_by_email(email)

        if user.is_verified:
            raise AlreadyVerifiedError("Email already verified")

        code = generate_verification_code()
        user.verification_code = code
        await self._db.commit()

        try:
            await self._mailer.send_verification_code(user.email, user.name, code)
        except EmailDeliveryError as e:
            raise VerificationDeliveryError("Failed to send verification code") from e

        logger.info("Resent verification code to user: %s", user.id)

    async def get_profile(self, user_id: str) -> User:
        """Get an account by id.

        Args:
            user_id: User identifier from the access token.

        Returns:
            The user.

        Raises:
            UserNotFoundError: If the account no longer exists.
        """
        user = await self._db.get(User, user_id)
        if user is None:
            raise UserNotFoundError("User not found")
        return user

    async def _get_by_email(self, email: str) -> User | None:
        result = await self._db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def _require_by_email(self, email: str) -> User:
        user = await self._get_by_email(normalize_email(email))
        if user is None:
            raise UserNotFoundError("User not found")
        return user
