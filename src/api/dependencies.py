# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

Example:
    @router.get("/guardians/{recipient_id}/notifications")
    async def list_notifications(
        recipient_id: str,
        service: NotificationServiceDep,
    ):
        ...
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.infrastructure.notifications import NotificationService


def get_notification_service(request: Request) -> NotificationService:
    """Get the notification service created at startup.

    Args:
        request: Incoming request.

    Returns:
        The application's NotificationService.

    Raises:
        HTTPException: 503 if the service has not been initialized.
    """
    service = getattr(request.app.state, "notification_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification service not initialized",
        )
    return service


NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
