# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admin account seed.

Registration only ever creates students, so admins are created here.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zimlearn.domains.auth.password import PasswordHasher
from zimlearn.domains.auth.service import normalize_email
from zimlearn.infrastructure.database.models import User
from zimlearn.models.common import UserRole

logger = logging.getLogger(__name__)


async def seed_admin_user(
    session: AsyncSession,
    email: str,
    password: str,
    name: str = "ZimLearn Admin",
    password_hasher: PasswordHasher | None = None,
) -> User:
    """Create a verified admin, or promote an existing account.

    Args:
        session: Database session.
        email: Admin email address.
        password: Admin password. Ignored when the account already exists.
        name: Display name for a new account.
        password_hasher: Hasher to use, defaults to PasswordHasher().

    Returns:
        The admin user.
    """
    email = normalize_email(email)
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is None:
        hasher = password_hasher or PasswordHasher()
        user = User(
            name=name,
            email=email,
            password_hash=hasher.hash(password),
            is_verified=True,
            role=UserRole.ADMIN.value,
        )
        session.add(user)
        logger.info("Created admin user: %s", email)
    else:
        user.role = UserRole.ADMIN.value
        user.is_verified = True
        user.verification_code = None
        logger.info("Promoted existing user to admin: %s", email)

    await session.commit()
    return user
