# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Learning resource models.

Tags live in their own table with an explicit position so that the
"any of these tags" filter is a plain IN subquery on every backend and
the caller's tag order survives a round trip.
"""

from typing import Any

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from zimlearn.infrastructure.database.models.base import (
    Base,
    JSONType,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)


class Resource(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A canonical learning resource from any provider.

    The provider payload's extra fields are kept in the "metadata" column,
    exposed as extra_metadata because Base.metadata is reserved.
    """

    __tablename__ = "resources"
    __table_args__ = (
        Index("ix_resources_subject_grade", "subject", "grade"),
        Index("ix_resources_type_difficulty", "type", "difficulty"),
        Index("ix_resources_source_is_active", "source", "is_active"),
        Index("ix_resources_created_at", "created_at"),
        CheckConstraint("grade IN ('O', 'A')", name="valid_resource_grade"),
        CheckConstraint(
            "type IN ('book', 'video', 'document', 'practice', 'quiz')",
            name="valid_resource_type",
        ),
        CheckConstraint(
            "difficulty IN ('beginner', 'intermediate', 'advanced')",
            name="valid_resource_difficulty",
        ),
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(50), nullable=False)
    grade: Mapped[str] = mapped_column(String(1), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    thumbnail_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    source: Mapped[str] = mapped_column(String(30), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    extra_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSONType,
        default=dict,
        nullable=False,
    )

    tag_links: Mapped[list["ResourceTag"]] = relationship(
        back_populates="resource",
        cascade="all, delete-orphan",
        order_by="ResourceTag.position",
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        """Tag values in their stored order."""
        return [link.value for link in self.tag_links]

    @tags.setter
    def tags(self, values: list[str]) -> None:
        self.tag_links = [
            ResourceTag(position=position, value=value)
            for position, value in enumerate(values)
        ]

    def __repr__(self) -> str:
        return f"<Resource {self.source}:{self.title!r}>"


class ResourceTag(Base):
    """One tag of a resource."""

    __tablename__ = "resource_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    resource_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("resources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    value: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    resource: Mapped[Resource] = relationship(back_populates="tag_links")
