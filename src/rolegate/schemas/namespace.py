# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from rolegate.services.namespace_tree import NamespaceNode


class NamespaceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    parent_id: UUID | None
    depth: int
    full_path: str
    domain: str | None
    created_at: datetime
    updated_at: datetime


class NamespaceTreeResponse(BaseModel):
    namespace: NamespaceResponse
    children: list[NamespaceTreeResponse] = []

    @classmethod
    def from_node(cls, node: NamespaceNode) -> NamespaceTreeResponse:
        return cls(
            namespace=NamespaceResponse.model_validate(node.namespace),
            children=[cls.from_node(child) for child in node.children],
        )
