# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from rolegate.repositories.base import BaseRepository
from rolegate.repositories.membership_repository import MembershipRepository
from rolegate.repositories.namespace_repository import NamespaceRepository
from rolegate.repositories.permission_repository import PermissionRepository
from rolegate.repositories.role_repository import RoleRepository
from rolegate.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "MembershipRepository",
    "NamespaceRepository",
    "PermissionRepository",
    "RoleRepository",
    "UserRepository",
]
