# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the application factory for the admissions
notification API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src import __version__
from src.api.routes import health
from src.api.v1 import router as v1_router
from src.core.config import Settings, get_settings
from src.infrastructure.events import get_event_bus
from src.infrastructure.notifications import (
    AdmissionsNotifier,
    NotificationService,
    create_notification_service,
)
from src.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    service: NotificationService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings, defaults to get_settings().
        service: Prebuilt notification service. When omitted, one is
            created from settings at startup and closed at shutdown.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(settings)
        logger.info(
            "Starting admissions notification API",
            environment=settings.environment,
            store_backend=settings.notifications.store_backend,
        )

        owned = service is None
        notification_service = service or await create_notification_service(settings)
        notifier = AdmissionsNotifier(notification_service)
        bus = get_event_bus()
        notifier.subscribe(bus)

        app.state.notification_service = notification_service
        app.state.admissions_notifier = notifier

        yield

        notifier.unsubscribe(bus)
        if owned:
            await notification_service.aclose()
        logger.info("Shutting down admissions notification API")

    app = FastAPI(
        title="Admissions Notification API",
        description="Guardian notifications for the admissions lifecycle",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    app.state.settings = settings

    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
