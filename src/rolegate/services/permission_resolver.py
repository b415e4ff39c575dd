# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from uuid import UUID

from rolegate.models.permission import Permission
from rolegate.repositories.membership_repository import MembershipRepository
from rolegate.repositories.permission_repository import PermissionRepository
from rolegate.repositories.role_repository import RoleRepository


class EffectivePermissionResolver:
    """Computes the permission set a principal holds in one namespace.

    Permissions are not inherited down the tree: the effective set is exactly
    the permissions of the role bound to the user in that namespace.
    """

    def __init__(
        self,
        roles: RoleRepository,
        memberships: MembershipRepository,
        permissions: PermissionRepository,
    ) -> None:
        self.roles = roles
        self.memberships = memberships
        self.permissions = permissions

    async def member_permissions(self, user_id: str, namespace_id: UUID) -> frozenset[UUID] | None:
        """Like ``effective_permissions`` but None when the user is not a member."""
        role_id = await self.memberships.role_id_for(user_id, namespace_id)
        if role_id is None:
            return None
        return await self.roles.permission_ids(role_id)

    async def effective_permissions(self, user_id: str, namespace_id: UUID) -> frozenset[UUID]:
        permissions = await self.member_permissions(user_id, namespace_id)
        return permissions if permissions is not None else frozenset()

    async def has_permission(self, user_id: str, permission_name: str, namespace_id: UUID) -> bool:
        permission = await self.permissions.get_by_name(permission_name)
        if permission is None:
            return False
        return permission.id in await self.effective_permissions(user_id, namespace_id)

    async def role_permissions(self, role_id: UUID) -> frozenset[UUID]:
        return await self.roles.permission_ids(role_id)

    async def permission_details(self, user_id: str, namespace_id: UUID) -> list[Permission]:
        role_id = await self.memberships.role_id_for(user_id, namespace_id)
        if role_id is None:
            return []
        return await self.roles.permissions(role_id)
