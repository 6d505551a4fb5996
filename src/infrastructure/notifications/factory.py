# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification factory.

Turns a lifecycle stage, a guardian and contextual values into a fully
rendered Notification with every channel pending. Construction is pure:
nothing is sent and nothing is stored here.
"""

import logging
from collections.abc import Mapping

from src.core.config.settings import NotificationSettings
from src.infrastructure.notifications.rendering import placeholders, render
from src.infrastructure.notifications.templates import (
    TemplateRegistry,
    get_template_registry,
)
from src.infrastructure.notifications.types import (
    DeliveryStatus,
    Guardian,
    Locale,
    Notification,
    NotificationStage,
)

logger = logging.getLogger(__name__)


class NotificationFactory:
    """Builds notifications from template bundles.

    Attributes:
        registry: Template registry used to resolve stages.
        school_name: Organization name exposed as {schoolName}.
        school_phone: Organization phone exposed as {schoolPhone}.
    """

    def __init__(
        self,
        registry: TemplateRegistry | None = None,
        settings: NotificationSettings | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            registry: Template registry, defaults to the shared registry.
            settings: Notification settings for organization constants.
        """
        settings = settings or NotificationSettings()
        self.registry = registry or get_template_registry()
        self.school_name = settings.school_name
        self.school_phone = settings.school_phone

    def build_variables(
        self,
        recipient: Guardian,
        student_name: str,
        context: Mapping[str, str] | None = None,
        application_id: str | None = None,
        lead_id: str | None = None,
    ) -> dict[str, str]:
        """Merge base variables with caller context.

        Caller context wins on key collisions.

        Args:
            recipient: Guardian the notification is for.
            student_name: Student display name.
            context: Stage-specific values.
            application_id: Related application, if any.
            lead_id: Related lead, if any.

        Returns:
            Variables for template rendering.
        """
        variables = {
            "studentName": student_name,
            "applicationId": application_id or "",
            "leadId": lead_id or "",
            "guardianName": recipient.full_name,
            "schoolName": self.school_name,
            "schoolPhone": self.school_phone,
        }
        if context:
            variables.update({key: str(value) for key, value in context.items()})
        return variables

    def create(
        self,
        stage: NotificationStage | str,
        recipient: Guardian,
        student_name: str,
        context: Mapping[str, str] | None = None,
        application_id: str | None = None,
        lead_id: str | None = None,
        locale: Locale | str = Locale.EN,
    ) -> Notification:
        """Create a notification for one guardian.

        Args:
            stage: Lifecycle stage.
            recipient: Guardian receiving the notification.
            student_name: Student display name.
            context: Stage-specific template values.
            application_id: Related application, if any.
            lead_id: Related lead, if any.
            locale: Content locale, as a Locale or its code.

        Returns:
            Notification with every channel pending.

        Raises:
            UnknownStageError: If the stage has no template bundle.
            ValueError: If the locale is not supported.
        """
        bundle = self.registry.resolve(stage)
        locale = Locale(locale)
        variables = self.build_variables(
            recipient=recipient,
            student_name=student_name,
            context=context,
            application_id=application_id,
            lead_id=lead_id,
        )
        content = bundle.for_locale(locale)

        unresolved = placeholders(content.message) - variables.keys()
        if unresolved:
            logger.debug(
                "Stage %s rendered without values for: %s",
                bundle.stage.value,
                ", ".join(sorted(unresolved)),
            )

        return Notification(
            recipient_id=recipient.id,
            recipient_name=recipient.full_name,
            recipient_email=recipient.email,
            recipient_phone=recipient.phone,
            student_name=student_name,
            application_id=application_id,
            lead_id=lead_id,
            stage=bundle.stage,
            channels=tuple(bundle.channels),
            status={channel: DeliveryStatus.PENDING for channel in bundle.channels},
            title=render(content.title, variables),
            message=render(content.message, variables),
            email_subject=render(content.email_subject, variables),
            sms_message=render(content.sms_message, variables),
            priority=bundle.priority,
            locale=locale,
            data=variables,
        )
