# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

"""Error taxonomy for the authorization core.

Every error raised by the core derives from ``RolegateError`` and carries a
stable ``code`` that the HTTP adapter maps to a status code
(see ``rolegate.api.errors``). Errors are never retried or swallowed inside
the core.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "AuthorizationDenied",
    "ConfigurationError",
    "ConflictError",
    "NotFoundError",
    "RolegateError",
    "ValidationError",
]


class RolegateError(Exception):
    """Base exception for the authorization core.

    Attributes:
        code: Stable error code string (e.g. ``"NOT_FOUND"``).
        message: Human-readable error description.
        details: Additional context passed as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(RolegateError):
    """The deployment is misconfigured (e.g. no root namespace). Not request-recoverable."""

    code: str = "CONFIGURATION_ERROR"
    message: str = "Invalid configuration"


class NotFoundError(RolegateError):
    """Unknown namespace, role, permission or user id."""

    code: str = "NOT_FOUND"
    message: str = "Resource not found"


class ValidationError(RolegateError):
    """A request would break a structural invariant of the hierarchy."""

    code: str = "VALIDATION_ERROR"
    message: str = "Validation failed"


class ConflictError(ValidationError):
    """Duplicate name, path, domain or binding."""

    code: str = "CONFLICT"
    message: str = "Resource already exists"


class AuthorizationDenied(RolegateError):
    """A hierarchy predicate evaluated false.

    The message never reveals the target's permission identities or counts.
    Permission-assignment denials carry the reason about the actor's own set.
    """

    code: str = "AUTHORIZATION_DENIED"
    message: str = "You are not allowed to perform this action"
