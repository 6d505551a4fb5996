# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Guardian notification endpoints.

This module provides endpoints for guardians to:
- List their admissions notifications
- Get the unread in-app count
- Mark one or all notifications as read

Example:
    GET /api/v1/guardians/{recipient_id}/notifications
    GET /api/v1/guardians/{recipient_id}/notifications/unread-count
    POST /api/v1/notifications/{notification_id}/read
    POST /api/v1/guardians/{recipient_id}/notifications/read-all
"""

from datetime import datetime

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from src.api.dependencies import NotificationServiceDep
from src.infrastructure.notifications import Notification, NotificationStoreError
from src.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================


class NotificationInfo(BaseModel):
    """One notification as shown in a guardian's inbox."""

    id: str
    stage: str
    title: str
    message: str
    student_name: str
    application_id: str | None = None
    lead_id: str | None = None
    priority: str
    language: str
    channels: list[str]
    status: dict[str, str]
    created_at: datetime
    read_at: datetime | None = None
    is_unread: bool

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationInfo":
        return cls(
            id=notification.id,
            stage=notification.stage.value,
            title=notification.title,
            message=notification.message,
            student_name=notification.student_name,
            application_id=notification.application_id,
            lead_id=notification.lead_id,
            priority=notification.priority.value,
            language=notification.locale.value,
            channels=[c.value for c in notification.channels],
            status={c.value: s.value for c, s in notification.status.items()},
            created_at=notification.created_at,
            read_at=notification.read_at,
            is_unread=notification.is_unread,
        )


class NotificationListResponse(BaseModel):
    """Response for a guardian's notification list."""

    notifications: list[NotificationInfo]
    total: int = Field(description="Number of notifications returned")
    unread: int = Field(description="Unread in-app notifications")


class UnreadCountResponse(BaseModel):
    """Response for the unread counter."""

    recipient_id: str
    unread: int


class MarkReadResponse(BaseModel):
    """Response for marking one notification as read."""

    id: str
    changed: bool = Field(description="False when the notification was not unread")


class MarkAllReadResponse(BaseModel):
    """Response for marking all of a guardian's notifications as read."""

    recipient_id: str
    marked: int


def _store_unavailable(e: NotificationStoreError) -> HTTPException:
    logger.error("Notification store error", error=str(e))
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Notification store unavailable",
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get(
    "/guardians/{recipient_id}/notifications",
    response_model=NotificationListResponse,
)
async def list_notifications(
    recipient_id: str,
    service: NotificationServiceDep,
) -> NotificationListResponse:
    """List a guardian's notifications, oldest first.

    Returns:
        NotificationListResponse with notifications and unread count.

    Raises:
        HTTPException: 503 if the store fails.
    """
    try:
        notifications = await service.list_by_recipient(recipient_id)
    except NotificationStoreError as e:
        raise _store_unavailable(e) from e

    items = [NotificationInfo.from_notification(n) for n in notifications]
    return NotificationListResponse(
        notifications=items,
        total=len(items),
        unread=sum(1 for item in items if item.is_unread),
    )


@router.get(
    "/guardians/{recipient_id}/notifications/unread-count",
    response_model=UnreadCountResponse,
)
async def get_unread_count(
    recipient_id: str,
    service: NotificationServiceDep,
) -> UnreadCountResponse:
    """Count a guardian's delivered but unread in-app notifications."""
    try:
        unread = await service.unread_count(recipient_id)
    except NotificationStoreError as e:
        raise _store_unavailable(e) from e
    return UnreadCountResponse(recipient_id=recipient_id, unread=unread)


@router.post(
    "/notifications/{notification_id}/read",
    response_model=MarkReadResponse,
)
async def mark_notification_read(
    notification_id: str,
    service: NotificationServiceDep,
) -> MarkReadResponse:
    """Mark one notification as read.

    Marking an already read or undelivered notification is a no-op and
    reports changed=False.

    Raises:
        HTTPException: 404 if the notification does not exist, 503 if the
            store fails.
    """
    try:
        if await service.get(notification_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Notification {notification_id} not found",
            )
        changed = await service.mark_read(notification_id)
    except NotificationStoreError as e:
        raise _store_unavailable(e) from e
    return MarkReadResponse(id=notification_id, changed=changed)


@router.post(
    "/guardians/{recipient_id}/notifications/read-all",
    response_model=MarkAllReadResponse,
)
async def mark_all_notifications_read(
    recipient_id: str,
    service: NotificationServiceDep,
) -> MarkAllReadResponse:
    """Mark every unread notification of a guardian as read."""
    try:
        marked = await service.mark_all_read(recipient_id)
    except NotificationStoreError as e:
        raise _store_unavailable(e) from e
    return MarkAllReadResponse(recipient_id=recipient_id, marked=marked)
