# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.exceptions import ConflictError, NotFoundError, ValidationError
from rolegate.models.membership import NamespaceMembership
from rolegate.models.permission import Permission
from rolegate.models.role import Role, role_permissions
from rolegate.repositories.base import BaseRepository
from rolegate.repositories.namespace_repository import NamespaceRepository


class RoleRepository(BaseRepository[Role]):
    """The role directory.

    A role is *available* in namespace N when it originates in N or in one of
    N's ancestors; the root's roles are therefore available everywhere.
    """

    def __init__(self, session: AsyncSession, namespaces: NamespaceRepository) -> None:
        super().__init__(session, Role)
        self.namespaces = namespaces

    async def get_by_name(self, name: str, namespace_id: UUID) -> Role | None:
        result = await self.session.execute(
            select(Role).where(Role.name == name, Role.namespace_id == namespace_id)
        )
        return result.scalar_one_or_none()

    async def _visible_origin_ids(self, namespace_id: UUID) -> list[UUID]:
        return [*await self.namespaces.ancestor_ids(namespace_id), namespace_id]

    async def available_in_namespace(self, namespace_id: UUID) -> list[Role]:
        if await self.namespaces.get_by_id(namespace_id) is None:
            return []
        origin_ids = await self._visible_origin_ids(namespace_id)
        result = await self.session.execute(
            select(Role).where(Role.namespace_id.in_(origin_ids)).order_by(Role.name)
        )
        return list(result.scalars().all())

    async def is_available_in_namespace(self, role: Role, namespace_id: UUID) -> bool:
        if role.namespace_id == namespace_id:
            return True
        return role.namespace_id in await self.namespaces.ancestor_ids(namespace_id)

    async def is_editable_in_namespace(self, role: Role, namespace_id: UUID) -> bool:
        """Roles are only edited in the namespace they originate from."""
        return role.namespace_id == namespace_id

    async def list_for_origin(self, namespace_id: UUID) -> list[Role]:
        result = await self.session.execute(
            select(Role).where(Role.namespace_id == namespace_id).order_by(Role.name)
        )
        return list(result.scalars().all())

    # --- Permission edges ---

    async def permission_ids(self, role_id: UUID) -> frozenset[UUID]:
        result = await self.session.execute(
            select(role_permissions.c.permission_id).where(role_permissions.c.role_id == role_id)
        )
        return frozenset(result.scalars().all())

    async def permission_ids_for_roles(
        self, role_ids: Iterable[UUID]
    ) -> dict[UUID, frozenset[UUID]]:
        ids = list(role_ids)
        if not ids:
            return {}
        grouped: dict[UUID, set[UUID]] = {role_id: set() for role_id in ids}
        result = await self.session.execute(
            select(role_permissions.c.role_id, role_permissions.c.permission_id).where(
                role_permissions.c.role_id.in_(ids)
            )
        )
        for role_id, permission_id in result.all():
            grouped[role_id].add(permission_id)
        return {role_id: frozenset(perms) for role_id, perms in grouped.items()}

    async def permissions(self, role_id: UUID) -> list[Permission]:
        result = await self.session.execute(
            select(Permission)
            .join(role_permissions, role_permissions.c.permission_id == Permission.id)
            .where(role_permissions.c.role_id == role_id)
            .order_by(Permission.category, Permission.name)
        )
        return list(result.scalars().all())

    async def assign_permission(self, role_id: UUID, permission_id: UUID) -> bool:
        """Attach a permission; returns False when the edge already exists."""
        if permission_id in await self.permission_ids(role_id):
            return False
        await self.session.execute(
            insert(role_permissions).values(role_id=role_id, permission_id=permission_id)
        )
        return True

    async def remove_permission(self, role_id: UUID, permission_id: UUID) -> bool:
        result = await self.session.execute(
            delete(role_permissions).where(
                role_permissions.c.role_id == role_id,
                role_permissions.c.permission_id == permission_id,
            )
        )
        return result.rowcount > 0

    async def sync_permissions(self, role: Role, permission_ids: Iterable[UUID]) -> None:
        """Replace the role's permission set atomically."""
        if role.is_system:
            raise ValidationError("System roles cannot be modified", role_id=str(role.id))

        wanted = set(permission_ids)
        if wanted:
            result = await self.session.execute(
                select(Permission.id).where(Permission.id.in_(wanted))
            )
            missing = wanted - set(result.scalars().all())
            if missing:
                raise NotFoundError("Unknown permission id", count=len(missing))

        async with self.session.begin_nested():
            await self.session.execute(
                delete(role_permissions).where(role_permissions.c.role_id == role.id)
            )
            if wanted:
                await self.session.execute(
                    insert(role_permissions),
                    [{"role_id": role.id, "permission_id": pid} for pid in wanted],
                )

    # --- Lifecycle ---

    async def create_role(
        self,
        *,
        name: str,
        display_name: str,
        namespace_id: UUID,
        description: str | None = None,
        enabled: bool = True,
        is_system: bool = False,
    ) -> Role:
        if await self.namespaces.get_by_id(namespace_id) is None:
            raise NotFoundError("Namespace not found", namespace_id=str(namespace_id))
        if await self.get_by_name(name, namespace_id) is not None:
            raise ConflictError("A role with this name already exists in the namespace")
        return await self.create(
            Role(
                name=name,
                display_name=display_name,
                namespace_id=namespace_id,
                description=description,
                enabled=enabled,
                is_system=is_system,
            )
        )

    async def user_count(self, role_id: UUID, namespace_id: UUID | None = None) -> int:
        stmt = (
            select(func.count())
            .select_from(NamespaceMembership)
            .where(NamespaceMembership.role_id == role_id)
        )
        if namespace_id is not None:
            stmt = stmt.where(NamespaceMembership.namespace_id == namespace_id)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def delete(self, entity: Role) -> None:
        if entity.is_system:
            raise ValidationError("System roles cannot be deleted", role_id=str(entity.id))
        if await self.user_count(entity.id) > 0:
            raise ValidationError("Role is still assigned to users", role_id=str(entity.id))
        await self.session.execute(
            delete(role_permissions).where(role_permissions.c.role_id == entity.id)
        )
        await super().delete(entity)
