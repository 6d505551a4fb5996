# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admissions notification system.

Fans admissions lifecycle events out to every eligible guardian across
in-app, email and SMS, using localized (English/Arabic) templates, and
tracks per-channel delivery and in-app read state.

Key Components:
- NotificationService: Fan-out orchestrator
- AdmissionsNotifier: One trigger per lifecycle milestone, event bus glue
- NotificationFactory: Renders a Notification from a stage template
- TemplateRegistry: Stage to bilingual template bundle lookup
- Channels: InAppChannel, EmailChannel, SmsChannel
- Stores: InMemoryNotificationStore, SqlAlchemyNotificationStore

Usage:
    from src.infrastructure.notifications import (
        AdmissionsNotifier,
        create_notification_service,
    )

    service = await create_notification_service()
    notifier = AdmissionsNotifier(service)
    await notifier.notify_application_submitted(subject)

    unread = await service.unread_count(guardian_id)

Configuration (environment variables):
- NOTIFICATIONS_STORE_BACKEND: memory or sql
- NOTIFICATIONS_DEFAULT_LOCALE: en or ar
- NOTIFICATIONS_DB_URL: SQLAlchemy async URL for the sql backend
- SMTP_HOST, SMTP_USERNAME, SMTP_PASSWORD, SMTP_FROM_EMAIL: email transport
- SMS_GATEWAY_URL, SMS_API_KEY: SMS gateway
"""

from src.infrastructure.notifications.admissions import (
    ADMISSIONS_EVENT_STAGES,
    AdmissionsNotifier,
    subject_from_payload,
)
from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    EmailChannel,
    InAppChannel,
    SmsChannel,
)
from src.infrastructure.notifications.errors import (
    InvalidStatusTransitionError,
    NotificationError,
    NotificationStoreError,
    StoreUnavailableError,
    TemplateConfigurationError,
    UnknownStageError,
)
from src.infrastructure.notifications.factory import NotificationFactory
from src.infrastructure.notifications.rendering import render
from src.infrastructure.notifications.service import (
    FanOutResult,
    NotificationService,
    create_notification_service,
)
from src.infrastructure.notifications.sql_store import SqlAlchemyNotificationStore
from src.infrastructure.notifications.store import (
    InMemoryNotificationStore,
    NotificationStore,
)
from src.infrastructure.notifications.templates import (
    ADMISSIONS_TEMPLATES,
    TemplateBundle,
    TemplateRegistry,
    get_template_registry,
)
from src.infrastructure.notifications.types import (
    AdmissionsSubject,
    ChannelType,
    DeliveryStatus,
    Guardian,
    Locale,
    Notification,
    NotificationPriority,
    NotificationStage,
)

__all__ = [
    # Service
    "NotificationService",
    "create_notification_service",
    "FanOutResult",
    "AdmissionsNotifier",
    "ADMISSIONS_EVENT_STAGES",
    "subject_from_payload",
    # Construction
    "NotificationFactory",
    "render",
    "TemplateBundle",
    "TemplateRegistry",
    "ADMISSIONS_TEMPLATES",
    "get_template_registry",
    # Channels
    "BaseChannel",
    "ChannelResult",
    "InAppChannel",
    "EmailChannel",
    "SmsChannel",
    # Stores
    "NotificationStore",
    "InMemoryNotificationStore",
    "SqlAlchemyNotificationStore",
    # Types
    "AdmissionsSubject",
    "ChannelType",
    "DeliveryStatus",
    "Guardian",
    "Locale",
    "Notification",
    "NotificationPriority",
    "NotificationStage",
    # Errors
    "NotificationError",
    "UnknownStageError",
    "TemplateConfigurationError",
    "InvalidStatusTransitionError",
    "NotificationStoreError",
    "StoreUnavailableError",
]
