# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from rolegate.models.base import Base, TimestampMixin


class NamespaceMembership(TimestampMixin, Base):
    """Binding of one user to exactly one role inside one namespace."""

    __tablename__ = "user_namespace_roles"

    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    namespace_id: Mapped[UUID] = mapped_column(
        ForeignKey("namespaces.id", ondelete="CASCADE"),
        primary_key=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id"),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_user_namespace_roles_namespace", "namespace_id"),
        Index("idx_user_namespace_roles_role", "role_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<NamespaceMembership user={self.user_id!r} "
            f"namespace={self.namespace_id} role={self.role_id}>"
        )
