# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

import os

# Settings are read at import time by rolegate.main; provide test defaults.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")

from collections.abc import AsyncIterator
from dataclasses import dataclass
from uuid import uuid4

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from rolegate.config import Settings
from rolegate.models.base import Base
from rolegate.models.namespace import Namespace
from rolegate.models.role import Role
from rolegate.models.user import User
from rolegate.repositories.membership_repository import MembershipRepository
from rolegate.seed import SeedResult, seed_defaults
from rolegate.services.container import Services
from rolegate.services.denial_monitor import DenialMonitor
from rolegate.stores import MemoryTTLStore


def _get_test_database_url() -> str:
    """Return the test database URL from env, falling back to in-memory SQLite."""
    return os.environ.get(
        "TEST_DATABASE_URL",
        "sqlite+aiosqlite:///:memory:",
    )


def _create_engine(url: str) -> AsyncEngine:
    if not url.startswith("sqlite"):
        return create_async_engine(url, echo=False)

    engine = create_async_engine(
        url,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy
    # emit BEGIN itself and turn on foreign keys for every connection.
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):  # type: ignore[no-untyped-def]
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest.fixture
async def async_engine() -> AsyncIterator[AsyncEngine]:
    """Create an async engine for the test database."""
    engine = _create_engine(_get_test_database_url())
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(
    async_engine: AsyncEngine,
) -> AsyncIterator[AsyncSession]:
    """Provide a transactional database session that rolls back after each test."""
    session_factory = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url=_get_test_database_url(),
        jwt_secret_key=os.environ["JWT_SECRET_KEY"],
        max_namespace_depth=8,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def denial_monitor(clock: FakeClock) -> DenialMonitor:
    return DenialMonitor(MemoryTTLStore(clock=clock), window_seconds=60, threshold=3)


@pytest.fixture
def services(
    db_session: AsyncSession, settings: Settings, denial_monitor: DenialMonitor
) -> Services:
    return Services.for_session(db_session, settings, denial_monitor)


@pytest.fixture
async def scenario(db_session: AsyncSession) -> Scenario:
    """Seeded catalog plus one user per default role, all bound in the root."""
    seeded = await seed_defaults(db_session, "root")
    users = {}
    memberships = MembershipRepository(db_session)
    for role_name in ("admin", "manager", "customer"):
        user = User(**make_user(username=role_name))
        db_session.add(user)
        await db_session.flush()
        await memberships.create(user.id, seeded.root.id, seeded.roles[role_name].id)
        users[role_name] = user
    return Scenario(seed=seeded, users=users)


# ---------------------------------------------------------------------------
# Test doubles and scenario containers
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class Scenario:
    seed: SeedResult
    users: dict[str, User]

    @property
    def root(self) -> Namespace:
        return self.seed.root

    def role(self, name: str) -> Role:
        return self.seed.roles[name]

    def user_id(self, name: str) -> str:
        return self.users[name].id


# ---------------------------------------------------------------------------
# Factory helpers for creating model instances in tests
# ---------------------------------------------------------------------------


def make_user(
    *,
    username: str | None = None,
    email: str | None = None,
    status: str = "active",
) -> dict[str, object]:
    """Return kwargs suitable for constructing a User model instance."""
    user_id = uuid4().hex
    return {
        "id": user_id,
        "username": username or f"user-{user_id[:8]}",
        "email": email,
        "status": status,
    }


def make_permission(
    *,
    name: str | None = None,
    category: str | None = "custom",
    is_system: bool = False,
) -> dict[str, object]:
    """Return kwargs suitable for constructing a Permission model instance."""
    name = name or f"perm_{uuid4().hex[:8]}"
    return {
        "id": uuid4(),
        "name": name,
        "display_name": name.replace("_", " ").title(),
        "category": category,
        "is_system": is_system,
    }


def make_role(
    *,
    namespace_id: object,
    name: str | None = None,
    enabled: bool = True,
    is_system: bool = False,
) -> dict[str, object]:
    """Return kwargs suitable for constructing a Role model instance."""
    name = name or f"role-{uuid4().hex[:8]}"
    return {
        "id": uuid4(),
        "name": name,
        "display_name": name.title(),
        "namespace_id": namespace_id,
        "enabled": enabled,
        "is_system": is_system,
    }
