# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

This module provides the health endpoint for the API. The only
component probed is the notification store.
"""

import time
from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from src import __version__
from src.api.dependencies import NotificationServiceDep
from src.infrastructure.notifications import NotificationService
from src.utils.datetime import utc_now
from src.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class ComponentHealth(BaseModel):
    """Individual component health status."""
    status: str = Field(description="Component status")
    latency_ms: float | None = Field(None, description="Response latency in ms")
    message: str | None = Field(None, description="Additional status message")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="Overall health status")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")
    checked_at: datetime = Field(description="When health was checked")
    store: ComponentHealth


async def check_store(service: NotificationService) -> ComponentHealth:
    """Probe the notification store."""
    start = time.time()
    try:
        available = await service.store.ping()
    except Exception as e:
        logger.error("Store health check failed", error=str(e))
        return ComponentHealth(status="unhealthy", message=str(e))

    latency = round((time.time() - start) * 1000, 2)
    if not available:
        return ComponentHealth(status="unhealthy", latency_ms=latency, message="Store unavailable")
    return ComponentHealth(status="healthy", latency_ms=latency)


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request, service: NotificationServiceDep) -> HealthResponse:
    """Check if the API and its notification store are healthy.

    Returns:
        HealthResponse with store status.
    """
    store_health = await check_store(service)
    return HealthResponse(
        status=store_health.status,
        version=__version__,
        environment=request.app.state.settings.environment,
        uptime_seconds=int(time.time() - _server_start_time),
        checked_at=utc_now(),
        store=store_health,
    )
