# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

import jwt
from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.auth.tokens import decode_access_token
from rolegate.config import get_settings
from rolegate.db.session import get_db
from rolegate.models.namespace import Namespace
from rolegate.models.user import User, UserStatus
from rolegate.services.container import Services

_bearer_scheme = HTTPBearer()


async def get_services(request: Request, db: AsyncSession = Depends(get_db)) -> Services:
    """Wire the per-request services around the request's session."""
    monitor = getattr(request.app.state, "denial_monitor", None)
    return Services.for_session(db, get_settings(), monitor)


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    services: Services = Depends(get_services),
) -> User:
    """Require a valid JWT and return the active user it names."""
    try:
        user_id = decode_access_token(credentials.credentials)
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await services.users.get_by_id(user_id)

    if user is None or user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


async def get_current_namespace(
    request: Request,
    x_namespace_id: str | None = Header(default=None),
    services: Services = Depends(get_services),
) -> Namespace:
    """Resolve the request's namespace from the override header or the Host."""
    return await services.tree.resolve(
        override_id=x_namespace_id,
        host=request.headers.get("host"),
    )
