# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    notifications: Guardian notification inbox and read-state endpoints.
"""

from fastapi import APIRouter

from src.api.v1 import notifications

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(notifications.router, tags=["Notifications"])

__all__ = ["router"]
