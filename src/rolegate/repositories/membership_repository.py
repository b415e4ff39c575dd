# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.exceptions import ConflictError, NotFoundError, ValidationError
from rolegate.models.membership import NamespaceMembership
from rolegate.models.role import Role


class MembershipRepository:
    """Persists (user, namespace) -> role bindings, one per pair."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find(
        self, user_id: str, namespace_id: UUID, *, for_update: bool = False
    ) -> NamespaceMembership | None:
        stmt = select(NamespaceMembership).where(
            NamespaceMembership.user_id == user_id,
            NamespaceMembership.namespace_id == namespace_id,
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists(self, user_id: str, namespace_id: UUID) -> bool:
        result = await self.session.execute(
            select(func.count())
            .select_from(NamespaceMembership)
            .where(
                NamespaceMembership.user_id == user_id,
                NamespaceMembership.namespace_id == namespace_id,
            )
        )
        return result.scalar_one() > 0

    async def role_id_for(self, user_id: str, namespace_id: UUID) -> UUID | None:
        result = await self.session.execute(
            select(NamespaceMembership.role_id).where(
                NamespaceMembership.user_id == user_id,
                NamespaceMembership.namespace_id == namespace_id,
            )
        )
        return result.scalar_one_or_none()

    async def role_for_user(self, user_id: str, namespace_id: UUID) -> Role | None:
        result = await self.session.execute(
            select(Role)
            .join(NamespaceMembership, NamespaceMembership.role_id == Role.id)
            .where(
                NamespaceMembership.user_id == user_id,
                NamespaceMembership.namespace_id == namespace_id,
            )
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: str, namespace_id: UUID, role_id: UUID) -> NamespaceMembership:
        if await self.exists(user_id, namespace_id):
            raise ConflictError("User is already assigned to this namespace")
        membership = NamespaceMembership(
            user_id=user_id, namespace_id=namespace_id, role_id=role_id
        )
        try:
            async with self.session.begin_nested():
                self.session.add(membership)
        except IntegrityError as exc:
            raise ConflictError("User is already assigned to this namespace") from exc
        return membership

    async def update_role(self, user_id: str, namespace_id: UUID, role_id: UUID) -> NamespaceMembership:
        membership = await self.find(user_id, namespace_id)
        if membership is None:
            raise NotFoundError("User namespace assignment not found")
        membership.role_id = role_id
        await self.session.flush()
        return membership

    async def delete(self, user_id: str, namespace_id: UUID) -> bool:
        result = await self.session.execute(
            delete(NamespaceMembership).where(
                NamespaceMembership.user_id == user_id,
                NamespaceMembership.namespace_id == namespace_id,
            )
        )
        return result.rowcount > 0

    async def delete_all_for_user(self, user_id: str) -> int:
        result = await self.session.execute(
            delete(NamespaceMembership).where(NamespaceMembership.user_id == user_id)
        )
        return result.rowcount

    async def delete_all_for_namespace(self, namespace_id: UUID) -> int:
        result = await self.session.execute(
            delete(NamespaceMembership).where(NamespaceMembership.namespace_id == namespace_id)
        )
        return result.rowcount

    async def list_for_user(self, user_id: str) -> list[NamespaceMembership]:
        result = await self.session.execute(
            select(NamespaceMembership).where(NamespaceMembership.user_id == user_id)
        )
        return list(result.scalars().all())

    async def list_for_namespace(self, namespace_id: UUID) -> list[NamespaceMembership]:
        result = await self.session.execute(
            select(NamespaceMembership)
            .where(NamespaceMembership.namespace_id == namespace_id)
            .order_by(NamespaceMembership.user_id)
        )
        return list(result.scalars().all())

    async def count_for_role(self, role_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(NamespaceMembership)
            .where(NamespaceMembership.role_id == role_id)
        )
        return result.scalar_one()

    async def role_origins_in(self, namespace_ids: Iterable[UUID]) -> list[tuple[UUID, UUID]]:
        """Distinct ``(membership namespace, role origin namespace)`` pairs."""
        ids = list(namespace_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(NamespaceMembership.namespace_id, Role.namespace_id)
            .join(Role, NamespaceMembership.role_id == Role.id)
            .where(NamespaceMembership.namespace_id.in_(ids))
            .distinct()
        )
        return [(ns_id, origin_id) for ns_id, origin_id in result.all()]

    async def count_using_origin_elsewhere(self, origin_id: UUID) -> int:
        """Bindings outside ``origin_id`` whose role originates in ``origin_id``."""
        result = await self.session.execute(
            select(func.count())
            .select_from(NamespaceMembership)
            .join(Role, NamespaceMembership.role_id == Role.id)
            .where(
                Role.namespace_id == origin_id,
                NamespaceMembership.namespace_id != origin_id,
            )
        )
        return result.scalar_one()

    # --- Bulk operations ---

    async def assign_user_to_multiple_namespaces(
        self, user_id: str, assignments: Iterable[tuple[UUID, UUID]]
    ) -> int:
        """Bind one user to many ``(namespace_id, role_id)`` pairs.

        Pairs the user already belongs to are skipped. Either every missing
        pair is inserted or none is. Returns the number inserted.
        """
        return await self._insert_missing(
            (user_id, namespace_id, role_id) for namespace_id, role_id in assignments
        )

    async def assign_multiple_users_to_namespace(
        self, namespace_id: UUID, assignments: Iterable[tuple[str, UUID]]
    ) -> int:
        """Bind many ``(user_id, role_id)`` pairs to one namespace; all-or-nothing."""
        return await self._insert_missing(
            (user_id, namespace_id, role_id) for user_id, role_id in assignments
        )

    async def _insert_missing(self, triples: Iterable[tuple[str, UUID, UUID]]) -> int:
        inserted = 0
        try:
            async with self.session.begin_nested():
                seen: set[tuple[str, UUID]] = set()
                for user_id, namespace_id, role_id in triples:
                    key = (user_id, namespace_id)
                    if key in seen or await self.exists(user_id, namespace_id):
                        continue
                    seen.add(key)
                    self.session.add(
                        NamespaceMembership(
                            user_id=user_id, namespace_id=namespace_id, role_id=role_id
                        )
                    )
                    inserted += 1
        except IntegrityError as exc:
            raise ValidationError("Bulk assignment failed; no memberships were created") from exc
        return inserted
