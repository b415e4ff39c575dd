# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from unittest.mock import MagicMock

from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.config import Settings
from rolegate.models.namespace import Namespace
from rolegate.models.permission import Permission
from rolegate.models.role import Role
from rolegate.models.user import User
from rolegate.repositories.base import BaseRepository
from rolegate.repositories.membership_repository import MembershipRepository
from rolegate.repositories.namespace_repository import DEFAULT_MAX_DEPTH, NamespaceRepository
from rolegate.repositories.permission_repository import PermissionRepository
from rolegate.repositories.role_repository import RoleRepository
from rolegate.repositories.user_repository import UserRepository
from rolegate.services.container import Services
from rolegate.services.denial_monitor import DenialMonitor


class TestBaseRepositoryInstantiation:
    def test_base_repository_stores_session_and_model(self) -> None:
        mock_session = MagicMock(spec=AsyncSession)
        repo = BaseRepository(mock_session, Namespace)
        assert repo.session is mock_session
        assert repo.model is Namespace


class TestRepositoryModels:
    def test_models(self) -> None:
        mock_session = MagicMock(spec=AsyncSession)
        namespaces = NamespaceRepository(mock_session)
        assert namespaces.model is Namespace
        assert namespaces.max_depth == DEFAULT_MAX_DEPTH
        assert RoleRepository(mock_session, namespaces).model is Role
        assert PermissionRepository(mock_session).model is Permission
        assert UserRepository(mock_session).model is User

    def test_membership_repository_is_not_id_keyed(self) -> None:
        repo = MembershipRepository(MagicMock(spec=AsyncSession))
        assert not isinstance(repo, BaseRepository)
        assert callable(getattr(repo, "assign_user_to_multiple_namespaces", None))
        assert callable(getattr(repo, "assign_multiple_users_to_namespace", None))


class TestServiceWiring:
    def test_services_share_one_session(
        self, settings: Settings, denial_monitor: DenialMonitor
    ) -> None:
        mock_session = MagicMock(spec=AsyncSession)
        services = Services.for_session(mock_session, settings, denial_monitor)
        assert services.tree.session is mock_session
        assert services.tree.max_depth == settings.max_namespace_depth
        assert services.tree.create_retries == settings.namespace_create_retries
        assert services.hierarchy.monitor is denial_monitor
        assert services.memberships.hierarchy is services.hierarchy
        assert services.resolver.roles is services.roles
