# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from rolegate.api.errors import register_exception_handlers
from rolegate.api.router import v1_router
from rolegate.config import get_settings
from rolegate.db.session import get_engine, get_session_factory
from rolegate.exceptions import ConfigurationError
from rolegate.repositories.namespace_repository import NamespaceRepository
from rolegate.services.denial_monitor import DenialMonitor
from rolegate.stores import MemoryTTLStore

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: startup and shutdown hooks."""
    settings = get_settings()
    configure_logging(settings.log_level)

    # Startup: auto-migrate in development mode
    if settings.environment == "development":
        import subprocess

        subprocess.run(["alembic", "upgrade", "head"], check=True)

    # Every request falls back to the root namespace, so refuse to start without one.
    async with get_session_factory()() as session:
        root = await NamespaceRepository(session).get_root()
    if root is None:
        logger.error("No root namespace exists; run scripts/seed.py first")
        raise ConfigurationError("No root namespace exists")
    logger.info("Serving with root namespace %r", root.full_path)

    yield

    # Shutdown: cleanup
    await get_engine().dispose()


app = FastAPI(
    title="Rolegate Authorization Service",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.denial_monitor = DenialMonitor(
    MemoryTTLStore(),
    window_seconds=get_settings().denial_window_seconds,
    threshold=get_settings().denial_alert_threshold,
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Namespace-ID"],
)

app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe. Returns 200 if the process is running."""
    return {"status": "healthy"}


@app.get("/ready")
async def ready() -> dict[str, str]:
    """Readiness probe. Checks database connectivity."""
    engine = get_engine()
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return {"status": "ready"}
