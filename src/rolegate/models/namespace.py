# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from rolegate.models.base import Base, TimestampMixin, UUIDMixin

PATH_SEPARATOR = "/"


class Namespace(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "namespaces"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("namespaces.id"),
        default=None,
    )
    depth: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    full_path: Mapped[str] = mapped_column(Text, nullable=False)
    domain: Mapped[str | None] = mapped_column(String(255), default=None)

    __table_args__ = (
        UniqueConstraint("name", "parent_id", name="uq_namespaces_name_parent"),
        UniqueConstraint("full_path", name="uq_namespaces_full_path"),
        UniqueConstraint("domain", name="uq_namespaces_domain"),
        Index("idx_namespaces_parent", "parent_id"),
        # At most one root: a partial unique index over the parentless rows.
        Index(
            "uq_namespaces_single_root",
            "depth",
            unique=True,
            postgresql_where=text("parent_id IS NULL"),
            sqlite_where=text("parent_id IS NULL"),
        ),
    )

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def child_path(self, name: str) -> str:
        return f"{self.full_path}{PATH_SEPARATOR}{name}"

    def __repr__(self) -> str:
        return f"<Namespace {self.full_path!r} depth={self.depth}>"
