# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

import jwt

from rolegate.config import get_settings


def decode_access_token(token: str) -> str:
    """Decode a JWT access token and return the principal id (``sub``).

    Tokens are issued by the identity layer; this service only verifies them.
    Raises jwt.InvalidTokenError on any validation failure.
    """
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )
    subject = payload["sub"]
    if not isinstance(subject, str) or not subject:
        raise jwt.InvalidTokenError("Token subject must be a non-empty string")
    return subject
