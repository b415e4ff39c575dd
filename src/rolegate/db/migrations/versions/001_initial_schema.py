# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

"""Initial schema: namespaces, users, permissions, roles and memberships.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    # ------------------------------------------------------------------
    # 1. namespaces
    # ------------------------------------------------------------------
    op.create_table(
        "namespaces",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "parent_id",
            sa.Uuid(),
            sa.ForeignKey("namespaces.id"),
            nullable=True,
        ),
        sa.Column("depth", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("full_path", sa.Text(), nullable=False),
        sa.Column("domain", sa.String(255), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("name", "parent_id", name="uq_namespaces_name_parent"),
        sa.UniqueConstraint("full_path", name="uq_namespaces_full_path"),
        sa.UniqueConstraint("domain", name="uq_namespaces_domain"),
    )
    op.create_index("idx_namespaces_parent", "namespaces", ["parent_id"])
    op.create_index(
        "uq_namespaces_single_root",
        "namespaces",
        ["depth"],
        unique=True,
        postgresql_where=sa.text("parent_id IS NULL"),
    )

    # ------------------------------------------------------------------
    # 2. users
    # ------------------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("username", sa.String(255), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('active', 'disabled', 'blocked')",
            name="ck_users_status",
        ),
    )

    # ------------------------------------------------------------------
    # 3. permissions
    # ------------------------------------------------------------------
    op.create_table(
        "permissions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("is_system", sa.Boolean(), nullable=False, server_default="false"),
        *_timestamps(),
    )
    op.create_index("idx_permissions_category", "permissions", ["category"])

    # ------------------------------------------------------------------
    # 4. roles
    # ------------------------------------------------------------------
    op.create_table(
        "roles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "namespace_id",
            sa.Uuid(),
            sa.ForeignKey("namespaces.id"),
            nullable=False,
        ),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("is_system", sa.Boolean(), nullable=False, server_default="false"),
        *_timestamps(),
        sa.UniqueConstraint("name", "namespace_id", name="uq_roles_name_namespace"),
    )
    op.create_index("idx_roles_namespace", "roles", ["namespace_id"])

    # ------------------------------------------------------------------
    # 5. role_permissions
    # ------------------------------------------------------------------
    op.create_table(
        "role_permissions",
        sa.Column(
            "role_id",
            sa.Uuid(),
            sa.ForeignKey("roles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "permission_id",
            sa.Uuid(),
            sa.ForeignKey("permissions.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    # ------------------------------------------------------------------
    # 6. user_namespace_roles
    # ------------------------------------------------------------------
    op.create_table(
        "user_namespace_roles",
        sa.Column(
            "user_id",
            sa.String(64),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "namespace_id",
            sa.Uuid(),
            sa.ForeignKey("namespaces.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "role_id",
            sa.Uuid(),
            sa.ForeignKey("roles.id"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index(
        "idx_user_namespace_roles_namespace", "user_namespace_roles", ["namespace_id"]
    )
    op.create_index("idx_user_namespace_roles_role", "user_namespace_roles", ["role_id"])


def downgrade() -> None:
    op.drop_table("user_namespace_roles")
    op.drop_table("role_permissions")
    op.drop_table("roles")
    op.drop_table("permissions")
    op.drop_table("users")
    op.drop_table("namespaces")
