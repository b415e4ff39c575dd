# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

"""Default catalog: the root namespace, system permissions and system roles.

``seed_defaults`` is idempotent: rows that already exist (matched by name)
are left alone, so it is safe to run on every deploy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.models.namespace import Namespace
from rolegate.models.permission import Permission
from rolegate.models.role import Role
from rolegate.repositories.namespace_repository import NamespaceRepository
from rolegate.repositories.permission_repository import PermissionRepository
from rolegate.repositories.role_repository import RoleRepository

logger = logging.getLogger(__name__)

# (name, display_name, description, category)
DEFAULT_PERMISSIONS: list[tuple[str, str, str, str]] = [
    ("system_settings", "System Settings", "Manage system-wide settings and configuration", "system"),
    ("login", "Login Access", "Log in to the system", "authentication"),
    ("api_token_generate", "Generate API Tokens", "Generate API tokens in profile settings", "authentication"),
    ("user_index", "Index Users", "View and search users", "user_management"),
    ("user_show", "Show User", "View other users", "user_management"),
    ("user_update", "Update User", "Update users with fewer permissions than yourself", "user_management"),
    ("user_create", "Create Users", "Create users with fewer permissions than yourself", "user_management"),
    ("user_delete", "Delete Users", "Delete users with fewer permissions than yourself", "user_management"),
    ("user_role_assign", "Assign User Roles", "Assign roles to users, limited by the hierarchy", "user_management"),
    ("user_permissions_view", "View User Permissions", "View the permissions of users", "user_management"),
    ("user_permissions_edit", "Edit User Permissions", "Edit permissions of users with fewer permissions than yourself", "user_management"),
    ("roles_list", "List Roles", "View the list of roles", "user_management"),
    ("roles_create", "Create Roles", "Create new roles", "role_management"),
    ("roles_edit", "Edit Roles", "Edit existing roles", "role_management"),
    ("roles_delete", "Delete Roles", "Delete roles", "role_management"),
    ("permissions_list", "List Permissions", "View the list of permissions", "user_management"),
    ("permissions_create", "Create Permissions", "Create new permissions", "role_management"),
    ("permissions_edit", "Edit Permissions", "Edit existing permissions", "role_management"),
    ("permissions_delete", "Delete Permissions", "Delete permissions", "role_management"),
]

MANAGER_PERMISSIONS = frozenset(
    {
        "login",
        "api_token_generate",
        "user_create",
        "user_index",
        "user_show",
        "user_update",
        "user_delete",
        "user_role_assign",
        "user_permissions_view",
        "user_permissions_edit",
        "roles_list",
        "permissions_list",
    }
)

CUSTOMER_PERMISSIONS = frozenset({"login", "api_token_generate"})


@dataclass(frozen=True)
class RoleDefinition:
    name: str
    display_name: str
    # None means every permission in the catalog.
    permissions: frozenset[str] | None


DEFAULT_ROLES = [
    RoleDefinition("admin", "Administrator", None),
    RoleDefinition("manager", "Manager", MANAGER_PERMISSIONS),
    RoleDefinition("customer", "Customer", CUSTOMER_PERMISSIONS),
]


@dataclass
class SeedResult:
    root: Namespace
    permissions: dict[str, Permission]
    roles: dict[str, Role]


async def seed_defaults(session: AsyncSession, root_name: str = "root") -> SeedResult:
    """Create whatever part of the default catalog is missing and flush."""
    namespaces = NamespaceRepository(session)
    permission_repo = PermissionRepository(session)
    roles = RoleRepository(session, namespaces)

    root = await namespaces.get_root()
    if root is None:
        root = await namespaces.create(Namespace(name=root_name, depth=0, full_path=root_name))
        logger.info("Created root namespace %r", root_name)

    permissions: dict[str, Permission] = {}
    for name, display_name, description, category in DEFAULT_PERMISSIONS:
        permission = await permission_repo.get_by_name(name)
        if permission is None:
            permission = await permission_repo.create(
                Permission(
                    name=name,
                    display_name=display_name,
                    description=description,
                    category=category,
                    is_system=True,
                )
            )
        permissions[name] = permission

    seeded: dict[str, Role] = {}
    for definition in DEFAULT_ROLES:
        role = await roles.get_by_name(definition.name, root.id)
        if role is None:
            role = await roles.create_role(
                name=definition.name,
                display_name=definition.display_name,
                namespace_id=root.id,
                is_system=True,
            )
            wanted: set[UUID] = {
                p.id
                for name, p in permissions.items()
                if definition.permissions is None or name in definition.permissions
            }
            for permission_id in sorted(wanted):
                await roles.assign_permission(role.id, permission_id)
            logger.info("Created role %r with %d permissions", definition.name, len(wanted))
        seeded[definition.name] = role

    await session.flush()
    return SeedResult(root=root, permissions=permissions, roles=seeded)
