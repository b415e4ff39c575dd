# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

"""Read-only authorization queries for the current principal.

Every endpoint is evaluated in the namespace resolved for the request
(``X-Namespace-ID`` header, then the Host, then the root).
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from rolegate.auth.dependencies import get_current_namespace, get_current_principal, get_services
from rolegate.models.namespace import Namespace
from rolegate.models.user import User
from rolegate.schemas.authorization import (
    DecisionResponse,
    EffectivePermissionsResponse,
    PermissionAssignmentRequest,
    PermissionAssignmentResponse,
)
from rolegate.schemas.role import AssignableRoleResponse, PermissionResponse
from rolegate.services.container import Services

router = APIRouter(prefix="/authorization", tags=["authorization"])


@router.get("/permissions", response_model=EffectivePermissionsResponse)
async def get_my_permissions(
    user: User = Depends(get_current_principal),
    namespace: Namespace = Depends(get_current_namespace),
    services: Services = Depends(get_services),
) -> EffectivePermissionsResponse:
    permissions = await services.resolver.permission_details(user.id, namespace.id)
    return EffectivePermissionsResponse(
        namespace_id=namespace.id,
        permissions=[PermissionResponse.model_validate(p) for p in permissions],
    )


@router.get("/users/{target_id}/manageable", response_model=DecisionResponse)
async def can_manage_user(
    target_id: str,
    user: User = Depends(get_current_principal),
    namespace: Namespace = Depends(get_current_namespace),
    services: Services = Depends(get_services),
) -> DecisionResponse:
    allowed = await services.hierarchy.can_manage_user_in_namespace(
        user.id, target_id, namespace.id
    )
    return DecisionResponse(allowed=allowed)


@router.get("/roles/assignable", response_model=list[AssignableRoleResponse])
async def list_assignable_roles(
    user: User = Depends(get_current_principal),
    namespace: Namespace = Depends(get_current_namespace),
    services: Services = Depends(get_services),
) -> list[AssignableRoleResponse]:
    roles = await services.hierarchy.get_assignable_roles_in_namespace(user.id, namespace.id)
    return [AssignableRoleResponse.model_validate(role) for role in roles]


@router.get("/roles/{role_id}/assignable", response_model=DecisionResponse)
async def can_assign_role(
    role_id: UUID,
    user: User = Depends(get_current_principal),
    namespace: Namespace = Depends(get_current_namespace),
    services: Services = Depends(get_services),
) -> DecisionResponse:
    allowed = await services.hierarchy.can_assign_role_in_namespace(
        user.id, role_id, namespace.id
    )
    return DecisionResponse(allowed=allowed)


@router.post("/permissions/validate", response_model=PermissionAssignmentResponse)
async def validate_permission_assignment(
    body: PermissionAssignmentRequest,
    user: User = Depends(get_current_principal),
    namespace: Namespace = Depends(get_current_namespace),
    services: Services = Depends(get_services),
) -> PermissionAssignmentResponse:
    result = await services.hierarchy.validate_permission_assignment(
        user.id, body.permission_ids, namespace.id
    )
    return PermissionAssignmentResponse.model_validate(result)
