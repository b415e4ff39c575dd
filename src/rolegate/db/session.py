# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from collections.abc import AsyncIterator
from functools import lru_cache
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from rolegate.config import Settings, get_settings


def engine_options(settings: Settings) -> dict[str, Any]:
    """Keyword arguments for ``create_async_engine``.

    SQLite keeps its driver defaults: it accepts neither the pool sizing
    nor the ``REPEATABLE READ`` isolation level used against PostgreSQL.
    """
    if make_url(settings.database_url).get_backend_name() == "sqlite":
        return {}
    options: dict[str, Any] = {
        "pool_size": settings.database_pool_size,
        "max_overflow": 10,
        "pool_timeout": 30,
    }
    if settings.database_isolation_level:
        options["isolation_level"] = settings.database_isolation_level
    return options


@lru_cache
def get_engine() -> AsyncEngine:
    """Create and cache the async database engine.

    Every PostgreSQL connection runs at the configured isolation level so
    that the reads behind one authorization decision see a single snapshot.
    """
    settings = get_settings()
    return create_async_engine(settings.database_url, **engine_options(settings))


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Create and cache the async session factory."""
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a database session."""
    async with get_session_factory()() as session:
        yield session
