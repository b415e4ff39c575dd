# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from rolegate.auth.dependencies import get_current_namespace, get_current_principal, get_services
from rolegate.models.namespace import Namespace
from rolegate.schemas.common import PaginatedResponse
from rolegate.schemas.namespace import NamespaceResponse, NamespaceTreeResponse
from rolegate.services.container import Services
from rolegate.services.namespace_tree import build_tree

router = APIRouter(
    prefix="/namespaces",
    tags=["namespaces"],
    dependencies=[Depends(get_current_principal)],
)


@router.get("", response_model=PaginatedResponse[NamespaceResponse])
async def list_namespaces(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    services: Services = Depends(get_services),
) -> PaginatedResponse[NamespaceResponse]:
    namespaces = await services.tree.namespaces.list_ordered()
    items = [NamespaceResponse.model_validate(ns) for ns in namespaces[offset : offset + limit]]
    return PaginatedResponse(items=items, total=len(namespaces), limit=limit, offset=offset)


@router.get("/tree", response_model=list[NamespaceTreeResponse])
async def get_namespace_forest(
    services: Services = Depends(get_services),
) -> list[NamespaceTreeResponse]:
    namespaces = await services.tree.namespaces.list_ordered()
    return [NamespaceTreeResponse.from_node(node) for node in build_tree(namespaces)]


@router.get("/current", response_model=NamespaceResponse)
async def get_current(
    namespace: Namespace = Depends(get_current_namespace),
) -> NamespaceResponse:
    return NamespaceResponse.model_validate(namespace)


@router.get("/{namespace_id}", response_model=NamespaceResponse)
async def get_namespace(
    namespace_id: UUID,
    services: Services = Depends(get_services),
) -> NamespaceResponse:
    return NamespaceResponse.model_validate(await services.tree.get(namespace_id))


@router.get("/{namespace_id}/ancestors", response_model=list[NamespaceResponse])
async def get_ancestors(
    namespace_id: UUID,
    services: Services = Depends(get_services),
) -> list[NamespaceResponse]:
    await services.tree.get(namespace_id)
    ancestors = await services.tree.get_ancestors(namespace_id)
    return [NamespaceResponse.model_validate(ns) for ns in ancestors]


@router.get("/{namespace_id}/children", response_model=list[NamespaceResponse])
async def get_children(
    namespace_id: UUID,
    services: Services = Depends(get_services),
) -> list[NamespaceResponse]:
    await services.tree.get(namespace_id)
    children = await services.tree.get_children(namespace_id)
    return [NamespaceResponse.model_validate(ns) for ns in children]


@router.get("/{namespace_id}/subtree", response_model=NamespaceTreeResponse)
async def get_subtree(
    namespace_id: UUID,
    services: Services = Depends(get_services),
) -> NamespaceTreeResponse:
    return NamespaceTreeResponse.from_node(await services.tree.get_subtree(namespace_id))
