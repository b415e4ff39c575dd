# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.config import Settings
from rolegate.repositories.membership_repository import MembershipRepository
from rolegate.repositories.namespace_repository import NamespaceRepository
from rolegate.repositories.permission_repository import PermissionRepository
from rolegate.repositories.role_repository import RoleRepository
from rolegate.repositories.user_repository import UserRepository
from rolegate.services.authorization import AuthorizationHierarchy
from rolegate.services.denial_monitor import DenialMonitor
from rolegate.services.membership_service import MembershipService
from rolegate.services.namespace_tree import NamespaceTree
from rolegate.services.permission_resolver import EffectivePermissionResolver


@dataclass
class Services:
    """Per-session wiring of repositories and services."""

    tree: NamespaceTree
    resolver: EffectivePermissionResolver
    hierarchy: AuthorizationHierarchy
    memberships: MembershipService
    roles: RoleRepository
    permissions: PermissionRepository
    users: UserRepository

    @classmethod
    def for_session(
        cls,
        session: AsyncSession,
        settings: Settings,
        monitor: DenialMonitor | None = None,
    ) -> Services:
        namespace_repo = NamespaceRepository(session, max_depth=settings.max_namespace_depth)
        membership_repo = MembershipRepository(session)
        role_repo = RoleRepository(session, namespace_repo)
        permission_repo = PermissionRepository(session)
        user_repo = UserRepository(session)

        resolver = EffectivePermissionResolver(role_repo, membership_repo, permission_repo)
        hierarchy = AuthorizationHierarchy(resolver, role_repo, user_repo, monitor)
        return cls(
            tree=NamespaceTree(
                namespace_repo,
                membership_repo,
                create_retries=settings.namespace_create_retries,
            ),
            resolver=resolver,
            hierarchy=hierarchy,
            memberships=MembershipService(
                hierarchy, membership_repo, role_repo, user_repo, namespace_repo
            ),
            roles=role_repo,
            permissions=permission_repo,
            users=user_repo,
        )
