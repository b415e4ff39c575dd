# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from fastapi import APIRouter

from rolegate.api.authorization import router as authorization_router
from rolegate.api.namespaces import router as namespaces_router

v1_router = APIRouter()
v1_router.include_router(namespaces_router)
v1_router.include_router(authorization_router)
