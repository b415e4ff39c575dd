# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

"""Guarded mutations of memberships, users and role permissions.

Each operation re-evaluates the hierarchy predicates inside the caller's
transaction, immediately before the write it guards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from rolegate.exceptions import NotFoundError, ValidationError
from rolegate.models.membership import NamespaceMembership
from rolegate.models.role import Role
from rolegate.models.user import User, UserStatus
from rolegate.repositories.membership_repository import MembershipRepository
from rolegate.repositories.namespace_repository import NamespaceRepository
from rolegate.repositories.role_repository import RoleRepository
from rolegate.repositories.user_repository import UserRepository
from rolegate.services.authorization import AuthorizationHierarchy

logger = logging.getLogger(__name__)


class MembershipService:
    def __init__(
        self,
        hierarchy: AuthorizationHierarchy,
        memberships: MembershipRepository,
        roles: RoleRepository,
        users: UserRepository,
        namespaces: NamespaceRepository,
    ) -> None:
        self.hierarchy = hierarchy
        self.memberships = memberships
        self.roles = roles
        self.users = users
        self.namespaces = namespaces

    async def assign_role(
        self, actor_id: str, target_id: str, namespace_id: UUID, role_id: UUID
    ) -> NamespaceMembership:
        """Bind ``target_id`` to ``role_id`` in the namespace, or change its role."""
        if actor_id == target_id:
            raise ValidationError("Cannot change your own role")
        await self._require_user(target_id)
        await self._require_namespace(namespace_id)
        role = await self._require_role(role_id)
        if not await self.roles.is_available_in_namespace(role, namespace_id):
            raise ValidationError("Role is not available in this namespace", role_id=str(role_id))
        if not role.enabled:
            raise ValidationError("Role is disabled", role_id=str(role_id))

        existing = await self.memberships.find(target_id, namespace_id, for_update=True)
        await self.hierarchy.require_assign_role(actor_id, role_id, namespace_id)
        if existing is not None:
            await self.hierarchy.require_manage_user(actor_id, target_id, namespace_id)
            membership = await self.memberships.update_role(target_id, namespace_id, role_id)
        else:
            membership = await self.memberships.create(target_id, namespace_id, role_id)
        logger.info("User %s bound to role %s in namespace %s", target_id, role.name, namespace_id)
        return membership

    async def remove_member(self, actor_id: str, target_id: str, namespace_id: UUID) -> None:
        if actor_id == target_id:
            raise ValidationError("Cannot remove yourself from a namespace")
        if await self.memberships.find(target_id, namespace_id, for_update=True) is None:
            raise NotFoundError("User namespace assignment not found")
        await self.hierarchy.require_manage_user(actor_id, target_id, namespace_id)
        await self.memberships.delete(target_id, namespace_id)
        logger.info("User %s removed from namespace %s", target_id, namespace_id)

    async def set_user_status(
        self, actor_id: str, target_id: str, namespace_id: UUID, status: UserStatus
    ) -> User:
        if actor_id == target_id:
            raise ValidationError("Cannot change your own status")
        user = await self._require_user(target_id)
        await self.hierarchy.require_manage_user(actor_id, target_id, namespace_id)
        return await self.users.set_status(user, status)

    async def delete_user(self, actor_id: str, target_id: str, namespace_id: UUID) -> None:
        if actor_id == target_id:
            raise ValidationError("Cannot delete yourself")
        user = await self._require_user(target_id)
        if user.status != UserStatus.DISABLED:
            raise ValidationError("Only disabled users can be deleted")
        await self.hierarchy.require_delete_user(actor_id, target_id, namespace_id)
        removed = await self.memberships.delete_all_for_user(target_id)
        await self.users.delete(user)
        logger.info("Deleted user %s (%d memberships removed)", target_id, removed)

    async def create_role(
        self,
        actor_id: str,
        namespace_id: UUID,
        *,
        name: str,
        display_name: str,
        permission_ids: Iterable[UUID] = (),
        description: str | None = None,
    ) -> Role:
        """Create a role originating in the namespace, weaker than the actor."""
        requested = frozenset(permission_ids)
        await self._require_namespace(namespace_id)
        await self.hierarchy.require_valid_permission_assignment(actor_id, requested, namespace_id)
        role = await self.roles.create_role(
            name=name,
            display_name=display_name,
            namespace_id=namespace_id,
            description=description,
        )
        await self.roles.sync_permissions(role, requested)
        return role

    async def set_role_permissions(
        self, actor_id: str, role_id: UUID, namespace_id: UUID, permission_ids: Iterable[UUID]
    ) -> Role:
        requested = frozenset(permission_ids)
        role = await self._require_role(role_id)
        if not await self.roles.is_editable_in_namespace(role, namespace_id):
            raise ValidationError(
                "Role can only be edited in the namespace it originates from",
                role_id=str(role_id),
            )
        await self.hierarchy.require_valid_permission_assignment(actor_id, requested, namespace_id)
        await self.roles.sync_permissions(role, requested)
        return role

    async def _require_user(self, user_id: str) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found", user_id=user_id)
        return user

    async def _require_role(self, role_id: UUID) -> Role:
        role = await self.roles.get_by_id(role_id)
        if role is None:
            raise NotFoundError("Role not found", role_id=str(role_id))
        return role

    async def _require_namespace(self, namespace_id: UUID) -> None:
        if await self.namespaces.get_by_id(namespace_id) is None:
            raise NotFoundError("Namespace not found", namespace_id=str(namespace_id))
