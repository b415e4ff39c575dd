# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from rolegate.schemas.role import PermissionResponse


class EffectivePermissionsResponse(BaseModel):
    namespace_id: UUID
    permissions: list[PermissionResponse]


class DecisionResponse(BaseModel):
    allowed: bool


class PermissionAssignmentRequest(BaseModel):
    permission_ids: list[UUID]


class PermissionAssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    valid: bool
    message: str | None = None
