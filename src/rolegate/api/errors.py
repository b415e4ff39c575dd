# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from rolegate.exceptions import (
    AuthorizationDenied,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    RolegateError,
    ValidationError,
)
from rolegate.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

# Most specific class first.
_STATUS_CODES: list[tuple[type[RolegateError], int]] = [
    (ConflictError, status.HTTP_409_CONFLICT),
    (ValidationError, 422),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AuthorizationDenied, status.HTTP_403_FORBIDDEN),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_code_for(exc: RolegateError) -> int:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _handle_rolegate_error(request: Request, exc: RolegateError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    body = ErrorResponse(detail=exc.message, code=exc.code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Map the core's error taxonomy onto HTTP responses."""
    app.add_exception_handler(RolegateError, _handle_rolegate_error)  # type: ignore[arg-type]
