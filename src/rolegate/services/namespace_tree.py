# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

"""Namespace hierarchy: resolution, traversal and structural changes.

Every structural write (create, move, delete) keeps the two derived columns
consistent: ``depth = parent.depth + 1`` and
``full_path = parent.full_path + "/" + name``.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from rolegate.exceptions import ConfigurationError, ConflictError, NotFoundError, ValidationError
from rolegate.models.namespace import PATH_SEPARATOR, Namespace
from rolegate.models.role import Role, role_permissions
from rolegate.repositories.membership_repository import MembershipRepository
from rolegate.repositories.namespace_repository import NamespaceRepository

logger = logging.getLogger(__name__)

_MAX_NAME_LENGTH = 255


@dataclass
class NamespaceNode:
    namespace: Namespace
    children: list[NamespaceNode] = field(default_factory=list)

    def count(self) -> int:
        return 1 + sum(child.count() for child in self.children)


@dataclass(frozen=True)
class CopyResult:
    copied: int
    skipped: int


def coerce_namespace_id(value: UUID | str | None) -> UUID | None:
    """Parse a namespace id from request input; malformed values become None."""
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(value.strip())
    except ValueError:
        return None


def host_to_domain(host: str) -> str | None:
    """Strip the port from a Host header value and normalise case."""
    host = host.strip().lower()
    if not host:
        return None
    if host.startswith("["):
        end = host.find("]")
        return host[: end + 1] if end != -1 else host
    if host.count(":") == 1:
        host = host.split(":", 1)[0]
    return host or None


def build_tree(flat_list: Iterable[Namespace]) -> list[NamespaceNode]:
    """Group a flat list by ``parent_id`` into a forest.

    Nodes whose parent is not part of the list become roots of the forest,
    so any subtree slice builds into a single tree. Input order is kept
    among siblings.
    """
    namespaces = list(flat_list)
    nodes = {ns.id: NamespaceNode(ns) for ns in namespaces}
    roots: list[NamespaceNode] = []
    for ns in namespaces:
        parent = nodes.get(ns.parent_id) if ns.parent_id is not None else None
        if parent is not None:
            parent.children.append(nodes[ns.id])
        else:
            roots.append(nodes[ns.id])
    return roots


class NamespaceTree:
    def __init__(
        self,
        namespaces: NamespaceRepository,
        memberships: MembershipRepository,
        *,
        create_retries: int = 3,
    ) -> None:
        self.namespaces = namespaces
        self.memberships = memberships
        self.session = namespaces.session
        self.create_retries = create_retries

    build_tree = staticmethod(build_tree)

    @property
    def max_depth(self) -> int:
        return self.namespaces.max_depth

    # --- Reads ---

    async def resolve(
        self, override_id: UUID | str | None = None, host: str | None = None
    ) -> Namespace:
        """Pick the active namespace for a request.

        Priority: explicit override id, then a namespace whose domain matches
        the request host, then the root namespace.
        """
        if override_id is not None:
            namespace_id = coerce_namespace_id(override_id)
            namespace = (
                await self.namespaces.get_by_id(namespace_id) if namespace_id is not None else None
            )
            if namespace is not None:
                return namespace
            logger.warning("Ignoring invalid namespace override %r", override_id)

        if host:
            domain = host_to_domain(host)
            if domain:
                namespace = await self.namespaces.get_by_domain(domain)
                if namespace is not None:
                    return namespace

        root = await self.namespaces.get_root()
        if root is None:
            logger.error("No namespace could be resolved: no root namespace exists")
            raise ConfigurationError("No root namespace exists")
        return root

    async def get(self, namespace_id: UUID) -> Namespace:
        namespace = await self.namespaces.get_by_id(namespace_id)
        if namespace is None:
            raise NotFoundError("Namespace not found", namespace_id=str(namespace_id))
        return namespace

    async def get_ancestors(self, namespace_id: UUID) -> list[Namespace]:
        return await self.namespaces.ancestor_chain(namespace_id)

    async def get_children(self, namespace_id: UUID) -> list[Namespace]:
        return await self.namespaces.list_children(namespace_id)

    async def list_all(self, *, as_tree: bool = False) -> list[Namespace] | list[NamespaceNode]:
        namespaces = await self.namespaces.list_ordered()
        return build_tree(namespaces) if as_tree else namespaces

    async def get_subtree(self, namespace_id: UUID) -> NamespaceNode:
        namespace = await self.get(namespace_id)
        descendants = await self.namespaces.list_descendants(namespace)
        return build_tree([namespace, *descendants])[0]

    async def validate_hierarchy(self, proposed_parent_id: UUID, node_id: UUID) -> bool:
        """Return False when placing ``node_id`` under ``proposed_parent_id`` makes a cycle."""
        if proposed_parent_id == node_id:
            return False
        ancestors = await self.namespaces.ancestor_chain(proposed_parent_id)
        return all(ancestor.id != node_id for ancestor in ancestors)

    # --- Writes ---

    async def create(self, name: str, parent_id: UUID | None = None) -> Namespace:
        name = _validate_name(name)
        for attempt in range(1, self.create_retries + 1):
            namespace = await self._prepare(name, parent_id)
            try:
                async with self.session.begin_nested():
                    self.session.add(namespace)
            except IntegrityError:
                logger.warning(
                    "Namespace insert for %r conflicted (attempt %d/%d)",
                    name,
                    attempt,
                    self.create_retries,
                )
                continue
            logger.info("Created namespace %s", namespace.full_path)
            return namespace
        raise ConflictError("Namespace could not be created due to a concurrent change")

    async def _prepare(self, name: str, parent_id: UUID | None) -> Namespace:
        if parent_id is None:
            if await self.namespaces.get_root() is not None:
                raise ConflictError("A root namespace already exists")
            depth, full_path = 0, name
        else:
            parent = await self.namespaces.get_by_id(parent_id)
            if parent is None:
                raise NotFoundError("Parent namespace not found", namespace_id=str(parent_id))
            depth, full_path = parent.depth + 1, parent.child_path(name)
            if depth > self.max_depth:
                raise ValidationError("Namespace hierarchy exceeds the maximum depth")

        if await self.namespaces.get_by_name_and_parent(name, parent_id) is not None:
            raise ConflictError("A namespace with this name already exists at this level")
        if await self.namespaces.get_by_path(full_path) is not None:
            raise ConflictError("A namespace with this path already exists")
        return Namespace(name=name, parent_id=parent_id, depth=depth, full_path=full_path)

    async def move(self, namespace_id: UUID, new_parent_id: UUID) -> Namespace:
        """Re-parent a namespace, rewriting depth and path for its whole subtree."""
        arena = await self.namespaces.load_arena()
        node = arena.get(namespace_id)
        if node is None:
            raise NotFoundError("Namespace not found", namespace_id=str(namespace_id))
        if node.is_root:
            raise ValidationError("Cannot move the root namespace")
        new_parent = arena.get(new_parent_id)
        if new_parent is None:
            raise NotFoundError("Parent namespace not found", namespace_id=str(new_parent_id))
        if new_parent_id == node.parent_id:
            return node
        if not await self.validate_hierarchy(new_parent_id, namespace_id):
            raise ValidationError("Moving the namespace would create a cycle")
        if await self.namespaces.get_by_name_and_parent(node.name, new_parent_id) is not None:
            raise ConflictError("A namespace with this name already exists at this level")

        children: dict[UUID, list[Namespace]] = defaultdict(list)
        for ns in arena.values():
            if ns.parent_id is not None:
                children[ns.parent_id].append(ns)

        # Validate every new depth before touching any row.
        height = _subtree_height(node, children)
        if new_parent.depth + 1 + height > self.max_depth:
            raise ValidationError("Namespace hierarchy exceeds the maximum depth")

        # Every binding in the subtree must stay on a role available after the move.
        base: set[UUID] = set()
        cursor: Namespace | None = new_parent
        while cursor is not None and cursor.id not in base:
            base.add(cursor.id)
            cursor = arena.get(cursor.parent_id) if cursor.parent_id is not None else None
        visible: dict[UUID, frozenset[UUID]] = {node.id: frozenset(base | {node.id})}
        pending = [node]
        while pending:
            current = pending.pop()
            for child in children[current.id]:
                visible[child.id] = visible[current.id] | {child.id}
                pending.append(child)
        for ns_id, origin_id in await self.memberships.role_origins_in(visible):
            if origin_id not in visible[ns_id]:
                raise ValidationError(
                    "Moving the namespace would leave members on roles that are not available",
                    namespace_id=str(ns_id),
                )

        node.parent_id = new_parent.id
        queue: deque[tuple[Namespace, Namespace]] = deque([(new_parent, node)])
        while queue:
            parent, current = queue.popleft()
            current.depth = parent.depth + 1
            current.full_path = parent.child_path(current.name)
            queue.extend((current, child) for child in children[current.id])

        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError("Namespace path conflicts with an existing namespace") from exc
        logger.info("Moved namespace %s under %s", node.full_path, new_parent.full_path)
        return node

    async def update_domain(self, namespace_id: UUID, domain: str | None) -> Namespace:
        namespace = await self.get(namespace_id)
        if namespace.is_root:
            raise ValidationError("Cannot update root namespace")
        normalized = host_to_domain(domain) if domain else None
        if normalized is not None:
            other = await self.namespaces.get_by_domain(normalized)
            if other is not None and other.id != namespace.id:
                raise ConflictError("Domain is already used by another namespace")
        namespace.domain = normalized
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError("Domain is already used by another namespace") from exc
        return namespace

    async def delete(self, namespace_id: UUID) -> None:
        namespace = await self.get(namespace_id)
        if namespace.is_root:
            raise ValidationError("Cannot delete root namespace")
        if await self.namespaces.count_children(namespace_id) > 0:
            raise ValidationError("Cannot delete namespace with children")
        if await self.memberships.count_using_origin_elsewhere(namespace_id) > 0:
            raise ValidationError(
                "Roles originating in this namespace are still assigned elsewhere"
            )

        removed = await self.memberships.delete_all_for_namespace(namespace_id)
        # Roles originating here are visible nowhere else once the node is gone.
        origin_roles = select(Role.id).where(Role.namespace_id == namespace_id)
        await self.session.execute(
            delete(role_permissions).where(role_permissions.c.role_id.in_(origin_roles))
        )
        await self.session.execute(delete(Role).where(Role.namespace_id == namespace_id))
        await self.namespaces.delete(namespace)
        logger.info(
            "Deleted namespace %s (%d memberships removed)", namespace.full_path, removed
        )

    async def copy_members_from_parent(self, namespace_id: UUID) -> CopyResult:
        """Give every member of the parent the same role in this namespace."""
        namespace = await self.get(namespace_id)
        if namespace.parent_id is None:
            raise ValidationError("Namespace has no parent")
        parent_members = await self.memberships.list_for_namespace(namespace.parent_id)
        copied = await self.memberships.assign_multiple_users_to_namespace(
            namespace.id, [(m.user_id, m.role_id) for m in parent_members]
        )
        return CopyResult(copied=copied, skipped=len(parent_members) - copied)


def _validate_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationError("Namespace name must not be empty")
    if PATH_SEPARATOR in name:
        raise ValidationError(f"Namespace name must not contain {PATH_SEPARATOR!r}")
    if len(name) > _MAX_NAME_LENGTH:
        raise ValidationError("Namespace name is too long")
    return name


def _subtree_height(node: Namespace, children: dict[UUID, list[Namespace]]) -> int:
    height = 0
    frontier = [node]
    while True:
        frontier = [child for ns in frontier for child in children[ns.id]]
        if not frontier:
            return height
        height += 1
