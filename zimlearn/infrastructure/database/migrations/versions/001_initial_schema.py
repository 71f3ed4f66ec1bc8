# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial schema: users, resources and resource tags.

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-15
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create users, resources and resource_tags."""
    # ==========================================================================
    # 1. users table
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("verification_code", sa.String(6), nullable=True),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("role IN ('student', 'admin')", name="valid_user_role"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ==========================================================================
    # 2. resources table
    # ==========================================================================
    op.create_table(
        "resources",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("author", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(50), nullable=False),
        sa.Column("grade", sa.String(1), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("thumbnail_url", sa.String(2048), nullable=True),
        sa.Column("source", sa.String(30), nullable=False),
        sa.Column("difficulty", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("metadata", JSON_TYPE, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("grade IN ('O', 'A')", name="valid_resource_grade"),
        sa.CheckConstraint(
            "type IN ('book', 'video', 'document', 'practice', 'quiz')",
            name="valid_resource_type",
        ),
        sa.CheckConstraint(
            "difficulty IN ('beginner', 'intermediate', 'advanced')",
            name="valid_resource_difficulty",
        ),
    )
    op.create_index("ix_resources_subject_grade", "resources", ["subject", "grade"])
    op.create_index("ix_resources_type_difficulty", "resources", ["type", "difficulty"])
    op.create_index("ix_resources_source_is_active", "resources", ["source", "is_active"])
    op.create_index("ix_resources_created_at", "resources", ["created_at"])

    # ==========================================================================
    # 3. resource_tags table
    # ==========================================================================
    op.create_table(
        "resource_tags",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "resource_id",
            sa.String(36),
            sa.ForeignKey("resources.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("value", sa.String(100), nullable=False),
    )
    op.create_index("ix_resource_tags_resource_id", "resource_tags", ["resource_id"])
    op.create_index("ix_resource_tags_value", "resource_tags", ["value"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("resource_tags")
    op.drop_table("resources")
    op.drop_table("users")
