# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    database_url: str
    database_pool_size: int = 20
    # Hierarchy predicates read the actor and the target in one transaction;
    # this isolation level makes those reads a single snapshot. Ignored for SQLite.
    database_isolation_level: str | None = "REPEATABLE READ"
    environment: str = "production"
    log_level: str = "info"
    cors_origins: list[str] = []

    # Namespace tree
    root_namespace_name: str = "root"
    max_namespace_depth: int = 32
    namespace_create_retries: int = 3

    # Denial monitoring
    denial_window_seconds: int = 900
    denial_alert_threshold: int = 20

    # Auth (tokens are issued elsewhere; only verified here)
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"

    model_config = {"env_file": ".env"}

    @model_validator(mode="after")
    def _validate_settings(self) -> "Settings":
        if len(self.jwt_secret_key) < 32:
            raise ValueError("jwt_secret_key must be at least 32 characters")
        if self.max_namespace_depth < 1:
            raise ValueError("max_namespace_depth must be at least 1")
        if self.namespace_create_retries < 1:
            raise ValueError("namespace_create_retries must be at least 1")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance. Lazy-loaded to avoid import-time failures."""
    return Settings()
