# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.exceptions import AuthorizationDenied, NotFoundError, ValidationError
from rolegate.models.role import Role
from rolegate.models.user import User, UserStatus
from rolegate.services.container import Services
from tests.conftest import Scenario, make_role, make_user


async def _new_user(session: AsyncSession, **kwargs: object) -> User:
    user = User(**make_user(**kwargs))  # type: ignore[arg-type]
    session.add(user)
    await session.flush()
    return user


class TestAssignRole:
    async def test_manager_adds_customer(
        self, services: Services, scenario: Scenario, db_session: AsyncSession
    ) -> None:
        newcomer = await _new_user(db_session)
        membership = await services.memberships.assign_role(
            scenario.user_id("manager"),
            newcomer.id,
            scenario.root.id,
            scenario.role("customer").id,
        )
        assert membership.role_id == scenario.role("customer").id

    async def test_manager_cannot_hand_out_admin(
        self, services: Services, scenario: Scenario, db_session: AsyncSession
    ) -> None:
        newcomer = await _new_user(db_session)
        with pytest.raises(AuthorizationDenied):
            await services.memberships.assign_role(
                scenario.user_id("manager"),
                newcomer.id,
                scenario.root.id,
                scenario.role("admin").id,
            )
        assert not await services.memberships.memberships.exists(newcomer.id, scenario.root.id)

    async def test_admin_changes_existing_role(
        self, services: Services, scenario: Scenario
    ) -> None:
        membership = await services.memberships.assign_role(
            scenario.user_id("admin"),
            scenario.user_id("customer"),
            scenario.root.id,
            scenario.role("manager").id,
        )
        assert membership.role_id == scenario.role("manager").id

    async def test_cannot_rebind_a_peer(
        self, services: Services, scenario: Scenario, db_session: AsyncSession
    ) -> None:
        peer = await _new_user(db_session)
        await services.memberships.memberships.create(
            peer.id, scenario.root.id, scenario.role("manager").id
        )
        # The role is assignable, but the manager cannot manage a peer.
        with pytest.raises(AuthorizationDenied):
            await services.memberships.assign_role(
                scenario.user_id("manager"),
                peer.id,
                scenario.root.id,
                scenario.role("customer").id,
            )

    async def test_self_rejected(self, services: Services, scenario: Scenario) -> None:
        admin = scenario.user_id("admin")
        with pytest.raises(ValidationError):
            await services.memberships.assign_role(
                admin, admin, scenario.root.id, scenario.role("customer").id
            )

    async def test_unavailable_role_rejected_before_comparison(
        self, services: Services, scenario: Scenario, db_session: AsyncSession
    ) -> None:
        a = await services.tree.create("a", scenario.root.id)
        b = await services.tree.create("b", scenario.root.id)
        foreign = await services.roles.create(Role(**make_role(namespace_id=b.id)))
        await services.memberships.memberships.create(
            scenario.user_id("admin"), a.id, scenario.role("admin").id
        )
        with pytest.raises(ValidationError, match="not available"):
            await services.memberships.assign_role(
                scenario.user_id("admin"), scenario.user_id("customer"), a.id, foreign.id
            )

    async def test_disabled_role_rejected(
        self, services: Services, scenario: Scenario, db_session: AsyncSession
    ) -> None:
        disabled = await services.roles.create(
            Role(**make_role(namespace_id=scenario.root.id, enabled=False))
        )
        newcomer = await _new_user(db_session)
        with pytest.raises(ValidationError, match="disabled"):
            await services.memberships.assign_role(
                scenario.user_id("admin"), newcomer.id, scenario.root.id, disabled.id
            )

    async def test_unknown_entities(self, services: Services, scenario: Scenario) -> None:
        admin = scenario.user_id("admin")
        customer_role = scenario.role("customer").id
        with pytest.raises(NotFoundError):
            await services.memberships.assign_role(admin, "ghost", scenario.root.id, customer_role)
        with pytest.raises(NotFoundError):
            await services.memberships.assign_role(
                admin, scenario.user_id("customer"), uuid4(), customer_role
            )
        with pytest.raises(NotFoundError):
            await services.memberships.assign_role(
                admin, scenario.user_id("customer"), scenario.root.id, uuid4()
            )


class TestRemoveMember:
    async def test_remove(self, services: Services, scenario: Scenario) -> None:
        await services.memberships.remove_member(
            scenario.user_id("manager"), scenario.user_id("customer"), scenario.root.id
        )
        assert not await services.memberships.memberships.exists(
            scenario.user_id("customer"), scenario.root.id
        )

    async def test_cannot_remove_stronger(self, services: Services, scenario: Scenario) -> None:
        with pytest.raises(AuthorizationDenied):
            await services.memberships.remove_member(
                scenario.user_id("manager"), scenario.user_id("admin"), scenario.root.id
            )

    async def test_missing_binding(self, services: Services, scenario: Scenario) -> None:
        child = await services.tree.create("child", scenario.root.id)
        with pytest.raises(NotFoundError):
            await services.memberships.remove_member(
                scenario.user_id("admin"), scenario.user_id("customer"), child.id
            )


class TestUserLifecycle:
    async def test_set_status(self, services: Services, scenario: Scenario) -> None:
        user = await services.memberships.set_user_status(
            scenario.user_id("manager"),
            scenario.user_id("customer"),
            scenario.root.id,
            UserStatus.BLOCKED,
        )
        assert user.status == UserStatus.BLOCKED

    async def test_cannot_change_own_status(self, services: Services, scenario: Scenario) -> None:
        admin = scenario.user_id("admin")
        with pytest.raises(ValidationError):
            await services.memberships.set_user_status(
                admin, admin, scenario.root.id, UserStatus.DISABLED
            )

    async def test_delete_requires_disabled(self, services: Services, scenario: Scenario) -> None:
        with pytest.raises(ValidationError, match="disabled"):
            await services.memberships.delete_user(
                scenario.user_id("admin"), scenario.user_id("customer"), scenario.root.id
            )

    async def test_delete_disabled_user(self, services: Services, scenario: Scenario) -> None:
        customer = scenario.user_id("customer")
        await services.memberships.set_user_status(
            scenario.user_id("admin"), customer, scenario.root.id, UserStatus.DISABLED
        )
        await services.memberships.delete_user(scenario.user_id("admin"), customer, scenario.root.id)
        assert await services.users.get_by_id(customer) is None
        assert await services.memberships.memberships.list_for_user(customer) == []

    async def test_delete_needs_manage_right(self, services: Services, scenario: Scenario) -> None:
        await services.users.set_status(scenario.users["admin"], UserStatus.DISABLED)
        with pytest.raises(AuthorizationDenied):
            await services.memberships.delete_user(
                scenario.user_id("manager"), scenario.user_id("admin"), scenario.root.id
            )


class TestRolePermissions:
    async def test_create_weaker_role(self, services: Services, scenario: Scenario) -> None:
        perms = scenario.seed.permissions
        role = await services.memberships.create_role(
            scenario.user_id("manager"),
            scenario.root.id,
            name="viewer",
            display_name="Viewer",
            permission_ids=[perms["login"].id, perms["user_index"].id],
        )
        assert await services.roles.permission_ids(role.id) == frozenset(
            {perms["login"].id, perms["user_index"].id}
        )

    async def test_create_role_as_strong_as_actor_denied(
        self, services: Services, scenario: Scenario
    ) -> None:
        ids = [scenario.seed.permissions[name].id for name in ("login", "api_token_generate")]
        with pytest.raises(AuthorizationDenied):
            await services.memberships.create_role(
                scenario.user_id("customer"),
                scenario.root.id,
                name="clone",
                display_name="Clone",
                permission_ids=ids,
            )
        assert await services.roles.get_by_name("clone", scenario.root.id) is None

    async def test_edit_only_in_origin_namespace(
        self, services: Services, scenario: Scenario
    ) -> None:
        child = await services.tree.create("child", scenario.root.id)
        role = await services.roles.create(Role(**make_role(namespace_id=scenario.root.id)))
        with pytest.raises(ValidationError, match="originates"):
            await services.memberships.set_role_permissions(
                scenario.user_id("admin"), role.id, child.id, []
            )

    async def test_set_role_permissions(self, services: Services, scenario: Scenario) -> None:
        role = await services.roles.create(Role(**make_role(namespace_id=scenario.root.id)))
        login = scenario.seed.permissions["login"].id
        await services.memberships.set_role_permissions(
            scenario.user_id("manager"), role.id, scenario.root.id, [login]
        )
        assert await services.roles.permission_ids(role.id) == frozenset({login})

    async def test_set_unheld_permissions_denied(
        self, services: Services, scenario: Scenario
    ) -> None:
        role = await services.roles.create(Role(**make_role(namespace_id=scenario.root.id)))
        with pytest.raises(AuthorizationDenied):
            await services.memberships.set_role_permissions(
                scenario.user_id("manager"),
                role.id,
                scenario.root.id,
                [scenario.seed.permissions["system_settings"].id],
            )
