# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.exceptions import ConfigurationError, ValidationError
from rolegate.models.namespace import PATH_SEPARATOR, Namespace
from rolegate.repositories.base import BaseRepository

DEFAULT_MAX_DEPTH = 32


class NamespaceRepository(BaseRepository[Namespace]):
    def __init__(self, session: AsyncSession, *, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        super().__init__(session, Namespace)
        self.max_depth = max_depth

    async def get_root(self) -> Namespace | None:
        result = await self.session.execute(
            select(Namespace).where(Namespace.parent_id.is_(None)).limit(2)
        )
        roots = list(result.scalars().all())
        if len(roots) > 1:
            raise ConfigurationError("More than one root namespace exists")
        return roots[0] if roots else None

    async def get_by_domain(self, domain: str) -> Namespace | None:
        result = await self.session.execute(select(Namespace).where(Namespace.domain == domain))
        return result.scalar_one_or_none()

    async def get_by_path(self, full_path: str) -> Namespace | None:
        result = await self.session.execute(
            select(Namespace).where(Namespace.full_path == full_path)
        )
        return result.scalar_one_or_none()

    async def get_by_name_and_parent(self, name: str, parent_id: UUID | None) -> Namespace | None:
        stmt = select(Namespace).where(Namespace.name == name)
        if parent_id is None:
            stmt = stmt.where(Namespace.parent_id.is_(None))
        else:
            stmt = stmt.where(Namespace.parent_id == parent_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_ordered(self) -> list[Namespace]:
        result = await self.session.execute(select(Namespace).order_by(Namespace.full_path))
        return list(result.scalars().all())

    async def list_children(self, namespace_id: UUID) -> list[Namespace]:
        result = await self.session.execute(
            select(Namespace).where(Namespace.parent_id == namespace_id).order_by(Namespace.name)
        )
        return list(result.scalars().all())

    async def count_children(self, namespace_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Namespace).where(Namespace.parent_id == namespace_id)
        )
        return result.scalar_one()

    async def list_descendants(self, namespace: Namespace) -> list[Namespace]:
        prefix = namespace.full_path + PATH_SEPARATOR
        result = await self.session.execute(
            select(Namespace)
            .where(Namespace.full_path.startswith(prefix, autoescape=True))
            .order_by(Namespace.full_path)
        )
        return list(result.scalars().all())

    async def load_arena(self) -> dict[UUID, Namespace]:
        """Load every namespace into a mapping indexed by id."""
        result = await self.session.execute(select(Namespace))
        return {ns.id: ns for ns in result.scalars().all()}

    async def ancestor_chain(self, namespace_id: UUID) -> list[Namespace]:
        """Return the ancestors of a namespace ordered root -> immediate parent.

        Unknown ids have no ancestors.
        """
        arena = await self.load_arena()
        return walk_ancestors(arena, namespace_id, self.max_depth)

    async def ancestor_ids(self, namespace_id: UUID) -> list[UUID]:
        return [ns.id for ns in await self.ancestor_chain(namespace_id)]


def walk_ancestors(
    arena: dict[UUID, Namespace], namespace_id: UUID, max_depth: int
) -> list[Namespace]:
    """Follow parent links through ``arena`` with an explicit step bound.

    Raises ValidationError when the chain is longer than ``max_depth`` or
    loops back on itself.
    """
    node = arena.get(namespace_id)
    if node is None:
        return []

    ancestors: list[Namespace] = []
    seen = {node.id}
    while node.parent_id is not None:
        if len(ancestors) >= max_depth:
            raise ValidationError(
                "Namespace hierarchy exceeds the maximum depth",
                namespace_id=str(namespace_id),
            )
        parent = arena.get(node.parent_id)
        if parent is None:
            break
        if parent.id in seen:
            raise ValidationError(
                "Namespace hierarchy contains a cycle",
                namespace_id=str(namespace_id),
            )
        seen.add(parent.id)
        ancestors.append(parent)
        node = parent

    ancestors.reverse()
    return ancestors
