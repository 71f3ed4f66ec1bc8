# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User account model."""

from sqlalchemy import Boolean, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from zimlearn.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from zimlearn.models.common import UserRole


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A registered learner or administrator.

    Attributes:
        name: Display name.
        email: Unique, lower-cased login address.
        password_hash: bcrypt hash of the password.
        verification_code: Pending 6-digit email code, cleared once verified.
        is_verified: Whether the email address has been confirmed.
        role: Account role, "student" or "admin".
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('student', 'admin')", name="valid_user_role"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    verification_code: Mapped[str | None] = mapped_column(String(6), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.STUDENT.value, nullable=False)

    @property
    def is_admin(self) -> bool:
        """Check if the user has the admin role."""
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<User {self.email}>"
