# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

import enum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from rolegate.models.base import Base, TimestampMixin


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    DISABLED = "disabled"
    BLOCKED = "blocked"


class User(TimestampMixin, Base):
    """Identity record of a principal.

    Credentials live with the identity layer; the core only needs the
    principal id and the account status.
    """

    __tablename__ = "users"

    # Opaque principal id supplied by the identity layer.
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String(255), default=None)
    status: Mapped[UserStatus] = mapped_column(
        String(20), nullable=False, default=UserStatus.ACTIVE.value
    )
