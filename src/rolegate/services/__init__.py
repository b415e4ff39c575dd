# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from rolegate.services.authorization import (
    AssignableRole,
    AuthorizationHierarchy,
    PermissionAssignmentResult,
)
from rolegate.services.container import Services
from rolegate.services.denial_monitor import DenialMonitor
from rolegate.services.membership_service import MembershipService
from rolegate.services.namespace_tree import CopyResult, NamespaceNode, NamespaceTree, build_tree
from rolegate.services.permission_resolver import EffectivePermissionResolver

__all__ = [
    "AssignableRole",
    "AuthorizationHierarchy",
    "CopyResult",
    "DenialMonitor",
    "EffectivePermissionResolver",
    "MembershipService",
    "NamespaceNode",
    "NamespaceTree",
    "PermissionAssignmentResult",
    "Services",
    "build_tree",
]
