# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from uuid import uuid4

from rolegate.models.base import Base, TimestampMixin, UUIDMixin
from rolegate.models.membership import NamespaceMembership
from rolegate.models.namespace import Namespace
from rolegate.models.permission import Permission
from rolegate.models.role import Role, role_permissions
from rolegate.models.user import User, UserStatus


class TestNamespaceModel:
    def test_root_namespace_has_no_parent(self) -> None:
        ns = Namespace(id=uuid4(), name="root", depth=0, full_path="root")
        assert ns.is_root
        assert ns.parent_id is None

    def test_child_path_joins_with_separator(self) -> None:
        parent = Namespace(id=uuid4(), name="acme", depth=1, full_path="root/acme")
        assert parent.child_path("sales") == "root/acme/sales"

    def test_child_is_not_root(self) -> None:
        ns = Namespace(id=uuid4(), name="acme", parent_id=uuid4(), depth=1, full_path="root/acme")
        assert not ns.is_root

    def test_repr_shows_path(self) -> None:
        ns = Namespace(name="root", depth=0, full_path="root")
        assert "root" in repr(ns)

    def test_uniqueness_constraints(self) -> None:
        names = {c.name for c in Namespace.__table__.constraints}
        assert "uq_namespaces_name_parent" in names
        assert "uq_namespaces_full_path" in names
        assert "uq_namespaces_domain" in names

    def test_single_root_index_is_partial_and_unique(self) -> None:
        index = next(i for i in Namespace.__table__.indexes if i.name == "uq_namespaces_single_root")
        assert index.unique
        assert index.dialect_options["postgresql"]["where"] is not None


class TestUserModel:
    def test_status_values(self) -> None:
        assert [s.value for s in UserStatus] == ["active", "disabled", "blocked"]

    def test_status_enum_compares_to_stored_string(self) -> None:
        assert UserStatus.DISABLED == "disabled"

    def test_status_column_default(self) -> None:
        status_col = User.__table__.c["status"]
        assert status_col.default is not None
        assert status_col.default.arg == "active"

    def test_id_is_opaque_string(self) -> None:
        user = User(id="ext-42", username="alice")
        assert user.id == "ext-42"


class TestRoleModel:
    def test_role_defaults(self) -> None:
        enabled_col = Role.__table__.c["enabled"]
        system_col = Role.__table__.c["is_system"]
        assert enabled_col.default.arg is True
        assert system_col.default.arg is False

    def test_role_name_unique_per_origin_namespace(self) -> None:
        names = {c.name for c in Role.__table__.constraints}
        assert "uq_roles_name_namespace" in names

    def test_role_permissions_primary_key(self) -> None:
        pk = [c.name for c in role_permissions.primary_key.columns]
        assert pk == ["role_id", "permission_id"]


class TestMembershipModel:
    def test_one_binding_per_user_and_namespace(self) -> None:
        pk = [c.name for c in NamespaceMembership.__table__.primary_key.columns]
        assert pk == ["user_id", "namespace_id"]

    def test_role_is_required(self) -> None:
        assert not NamespaceMembership.__table__.c["role_id"].nullable

    def test_repr(self) -> None:
        membership = NamespaceMembership(user_id="u1", namespace_id=uuid4(), role_id=uuid4())
        assert "u1" in repr(membership)


class TestMixins:
    def test_tables_registered(self) -> None:
        tables = set(Base.metadata.tables)
        assert {
            "namespaces",
            "users",
            "permissions",
            "roles",
            "role_permissions",
            "user_namespace_roles",
        } <= tables

    def test_uuid_and_timestamp_mixins(self) -> None:
        assert issubclass(Permission, UUIDMixin)
        assert issubclass(Permission, TimestampMixin)
        assert issubclass(NamespaceMembership, TimestampMixin)
        assert not issubclass(User, UUIDMixin)
