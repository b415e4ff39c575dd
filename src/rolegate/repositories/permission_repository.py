# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.exceptions import ValidationError
from rolegate.models.permission import Permission
from rolegate.repositories.base import BaseRepository


class PermissionRepository(BaseRepository[Permission]):
    """The permission catalog: flat and read-mostly."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Permission)

    async def get_by_name(self, name: str) -> Permission | None:
        result = await self.session.execute(select(Permission).where(Permission.name == name))
        return result.scalar_one_or_none()

    async def get_many(self, permission_ids: Iterable[UUID]) -> list[Permission]:
        ids = set(permission_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(Permission)
            .where(Permission.id.in_(ids))
            .order_by(Permission.category, Permission.name)
        )
        return list(result.scalars().all())

    async def list_ordered(self) -> list[Permission]:
        result = await self.session.execute(
            select(Permission).order_by(Permission.category, Permission.name)
        )
        return list(result.scalars().all())

    async def list_by_category(self, category: str) -> list[Permission]:
        result = await self.session.execute(
            select(Permission).where(Permission.category == category).order_by(Permission.name)
        )
        return list(result.scalars().all())

    async def categories(self) -> list[str]:
        result = await self.session.execute(
            select(Permission.category)
            .where(Permission.category.is_not(None))
            .distinct()
            .order_by(Permission.category)
        )
        return [c for c in result.scalars().all() if c is not None]

    async def delete(self, entity: Permission) -> None:
        if entity.is_system:
            raise ValidationError(
                "System permissions cannot be deleted", permission_id=str(entity.id)
            )
        await super().delete(entity)
