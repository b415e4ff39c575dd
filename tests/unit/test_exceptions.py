# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

import pytest

from rolegate.api.errors import status_code_for
from rolegate.exceptions import (
    AuthorizationDenied,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    RolegateError,
    ValidationError,
)


class TestErrorTaxonomy:
    @pytest.mark.parametrize(
        ("error_type", "code"),
        [
            (ConfigurationError, "CONFIGURATION_ERROR"),
            (NotFoundError, "NOT_FOUND"),
            (ValidationError, "VALIDATION_ERROR"),
            (ConflictError, "CONFLICT"),
            (AuthorizationDenied, "AUTHORIZATION_DENIED"),
        ],
    )
    def test_stable_codes(self, error_type: type[RolegateError], code: str) -> None:
        exc = error_type()
        assert exc.code == code
        assert isinstance(exc, RolegateError)

    def test_conflict_is_a_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            raise ConflictError("duplicate")

    def test_message_and_details(self) -> None:
        exc = NotFoundError("Namespace not found", namespace_id="abc")
        assert str(exc) == "Namespace not found"
        assert exc.message == "Namespace not found"
        assert exc.details == {"namespace_id": "abc"}

    def test_default_message_used_when_omitted(self) -> None:
        assert AuthorizationDenied().message == "You are not allowed to perform this action"

    def test_code_override(self) -> None:
        assert ValidationError("bad", code="CUSTOM").code == "CUSTOM"


class TestStatusMapping:
    @pytest.mark.parametrize(
        ("exc", "status_code"),
        [
            (ConfigurationError(), 500),
            (NotFoundError(), 404),
            (ValidationError(), 422),
            (ConflictError(), 409),
            (AuthorizationDenied(), 403),
            (RolegateError(), 500),
        ],
    )
    def test_status_code_for(self, exc: RolegateError, status_code: int) -> None:
        assert status_code_for(exc) == status_code
