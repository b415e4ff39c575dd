# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from rolegate.models.base import Base, TimestampMixin, UUIDMixin
from rolegate.models.membership import NamespaceMembership
from rolegate.models.namespace import Namespace
from rolegate.models.permission import Permission
from rolegate.models.role import Role, role_permissions
from rolegate.models.user import User, UserStatus

__all__ = [
    "Base",
    "Namespace",
    "NamespaceMembership",
    "Permission",
    "Role",
    "TimestampMixin",
    "UUIDMixin",
    "User",
    "UserStatus",
    "role_permissions",
]
