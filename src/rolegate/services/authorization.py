# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

"""Hierarchy predicates guarding user management.

Within one namespace an actor may act on a principal, or hand out a role,
only when the actor's effective permission set is a *proper superset* of the
target's. Equal sets never dominate each other, so peers cannot manage
peers and nobody can mint a role as strong as their own.

Denials raised by the ``require_*`` guards carry a generic message: the
target's permissions are never disclosed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from rolegate.exceptions import AuthorizationDenied
from rolegate.models.user import UserStatus
from rolegate.repositories.role_repository import RoleRepository
from rolegate.repositories.user_repository import UserRepository
from rolegate.services.denial_monitor import DenialMonitor
from rolegate.services.permission_resolver import EffectivePermissionResolver

logger = logging.getLogger(__name__)

NOT_HELD_MESSAGE = "Cannot assign permissions you do not have"
TOO_MANY_MESSAGE = "Cannot assign equal or more permissions than you have"


@dataclass(frozen=True)
class AssignableRole:
    id: UUID
    name: str
    display_name: str
    description: str | None
    permission_count: int
    origin_namespace_id: UUID


@dataclass(frozen=True)
class PermissionAssignmentResult:
    valid: bool
    message: str | None = None


class AuthorizationHierarchy:
    def __init__(
        self,
        resolver: EffectivePermissionResolver,
        roles: RoleRepository,
        users: UserRepository,
        monitor: DenialMonitor | None = None,
    ) -> None:
        self.resolver = resolver
        self.roles = roles
        self.users = users
        self.monitor = monitor

    # --- Predicates ---

    async def can_manage_user_in_namespace(
        self, actor_id: str, target_id: str, namespace_id: UUID
    ) -> bool:
        if actor_id == target_id:
            return True
        actor = await self.resolver.member_permissions(actor_id, namespace_id)
        if actor is None:
            return False
        target = await self.resolver.member_permissions(target_id, namespace_id)
        if target is None:
            return False
        return target < actor

    async def can_assign_role_in_namespace(
        self, actor_id: str, role_id: UUID, namespace_id: UUID
    ) -> bool:
        actor = await self.resolver.member_permissions(actor_id, namespace_id)
        if actor is None:
            return False
        role = await self.roles.get_by_id(role_id)
        if role is None or not await self.roles.is_available_in_namespace(role, namespace_id):
            return False
        return await self.roles.permission_ids(role.id) < actor

    async def can_delete_user_in_namespace(
        self, actor_id: str, target_id: str, namespace_id: UUID
    ) -> bool:
        if actor_id == target_id:
            return False
        target = await self.users.get_by_id(target_id)
        if target is None or target.status != UserStatus.DISABLED:
            return False
        return await self.can_manage_user_in_namespace(actor_id, target_id, namespace_id)

    async def get_assignable_roles_in_namespace(
        self, actor_id: str, namespace_id: UUID
    ) -> list[AssignableRole]:
        actor = await self.resolver.member_permissions(actor_id, namespace_id)
        if actor is None:
            return []
        available = await self.roles.available_in_namespace(namespace_id)
        edges = await self.roles.permission_ids_for_roles(role.id for role in available)
        return [
            AssignableRole(
                id=role.id,
                name=role.name,
                display_name=role.display_name,
                description=role.description,
                permission_count=len(edges[role.id]),
                origin_namespace_id=role.namespace_id,
            )
            for role in available
            if edges[role.id] < actor
        ]

    async def validate_permission_assignment(
        self, actor_id: str, requested_ids: Iterable[UUID], namespace_id: UUID
    ) -> PermissionAssignmentResult:
        requested = frozenset(requested_ids)
        actor = await self.resolver.effective_permissions(actor_id, namespace_id)
        if not requested <= actor:
            return PermissionAssignmentResult(False, NOT_HELD_MESSAGE)
        if len(requested) >= len(actor):
            return PermissionAssignmentResult(False, TOO_MANY_MESSAGE)
        return PermissionAssignmentResult(True)

    # --- Guards ---

    async def require_manage_user(self, actor_id: str, target_id: str, namespace_id: UUID) -> None:
        if not await self.can_manage_user_in_namespace(actor_id, target_id, namespace_id):
            self._deny(actor_id, "manage_user")

    async def require_assign_role(self, actor_id: str, role_id: UUID, namespace_id: UUID) -> None:
        if not await self.can_assign_role_in_namespace(actor_id, role_id, namespace_id):
            self._deny(actor_id, "assign_role")

    async def require_delete_user(self, actor_id: str, target_id: str, namespace_id: UUID) -> None:
        if not await self.can_delete_user_in_namespace(actor_id, target_id, namespace_id):
            self._deny(actor_id, "delete_user")

    async def require_valid_permission_assignment(
        self, actor_id: str, requested_ids: Iterable[UUID], namespace_id: UUID
    ) -> None:
        result = await self.validate_permission_assignment(actor_id, requested_ids, namespace_id)
        if not result.valid:
            self._deny(actor_id, "assign_permissions", result.message)

    def _deny(self, actor_id: str, action: str, message: str | None = None) -> None:
        if self.monitor is not None:
            self.monitor.record(actor_id, action)
        else:
            logger.info("Authorization denied for %s (action=%s)", actor_id, action)
        raise AuthorizationDenied(message)
