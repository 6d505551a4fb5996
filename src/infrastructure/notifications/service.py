# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification service for fanning admissions events out to guardians.

This service handles the complete notification flow:
1. Selecting the guardians that can receive notifications
2. Building one rendered notification per guardian and locale
3. Sending through every channel of the stage concurrently
4. Appending each finalized notification to the store once

Fan-out is best effort. A stage without a template aborts the whole
event before anything is sent. Channel failures end up as failed
entries in the status map and never reach the caller. Store failures
are raised once every guardian's delivery has finished.
"""

import asyncio
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from src.core.config.settings import Settings, get_settings
from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    EmailChannel,
    HttpSmsTransport,
    InAppChannel,
    SmsChannel,
    SmtpEmailTransport,
)
from src.infrastructure.notifications.errors import NotificationStoreError
from src.infrastructure.notifications.factory import NotificationFactory
from src.infrastructure.notifications.sql_store import SqlAlchemyNotificationStore
from src.infrastructure.notifications.store import (
    InMemoryNotificationStore,
    NotificationStore,
)
from src.infrastructure.notifications.types import (
    AdmissionsSubject,
    ChannelType,
    DeliveryStatus,
    Locale,
    Notification,
    NotificationStage,
)
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class FanOutResult:
    """Result of notifying the guardians of one lifecycle event.

    Attributes:
        stage: Stage that was notified.
        eligible_count: Guardians with notifications enabled.
        skipped_count: Guardians skipped because notifications are disabled.
        notifications: Finalized notifications, one per eligible guardian.
        channel_results: Results per channel per recipient.
        errors: Channel failure messages.
    """

    stage: NotificationStage
    eligible_count: int
    skipped_count: int
    notifications: list[Notification] = field(default_factory=list)
    channel_results: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when every eligible guardian got a notification built."""
        return len(self.notifications) == self.eligible_count

    @property
    def sent_count(self) -> int:
        """Channel sends that succeeded."""
        return sum(1 for r in self.channel_results if r["status"] == DeliveryStatus.SENT.value)

    @property
    def failed_count(self) -> int:
        """Channel sends that failed."""
        return sum(1 for r in self.channel_results if r["status"] == DeliveryStatus.FAILED.value)

    @property
    def by_channel(self) -> dict[ChannelType, Counter[DeliveryStatus]]:
        """Sent and failed counts per channel, keyed by channel type."""
        counts: dict[ChannelType, Counter[DeliveryStatus]] = {}
        for r in self.channel_results:
            channel = ChannelType(r["channel"])
            counts.setdefault(channel, Counter())[DeliveryStatus(r["status"])] += 1
        return counts


def build_default_channels(
    store: NotificationStore,
    settings: Settings,
) -> dict[ChannelType, BaseChannel]:
    """Build the standard channel lookup table.

    Email and SMS get a real transport only when their settings are
    complete; otherwise the channel is registered without one and every
    send through it fails.

    Args:
        store: Store backing the in-app channel.
        settings: Application settings.

    Returns:
        Dispatcher per channel type.
    """
    email_transport = SmtpEmailTransport(settings.smtp) if settings.smtp.is_configured else None
    sms_transport = HttpSmsTransport(settings.sms) if settings.sms.is_configured else None

    if email_transport is None:
        logger.warning("Email notifications disabled: SMTP settings incomplete")
    if sms_transport is None:
        logger.warning("SMS notifications disabled: SMS gateway settings incomplete")

    return {
        ChannelType.IN_APP: InAppChannel(store),
        ChannelType.EMAIL: EmailChannel(
            transport=email_transport,
            school_name=settings.notifications.school_name,
        ),
        ChannelType.SMS: SmsChannel(transport=sms_transport),
    }


class NotificationService:
    """Fans admissions lifecycle events out to guardians.

    Attributes:
        store: Notification store shared with the read side.
        channels: Dispatcher per channel type.
    """

    def __init__(
        self,
        store: NotificationStore,
        factory: NotificationFactory | None = None,
        channels: Mapping[ChannelType, BaseChannel] | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the notification service.

        Args:
            store: Notification store.
            factory: Notification factory, built from settings when omitted.
            channels: Dispatcher lookup table, built from settings when omitted.
            settings: Application settings, defaults to get_settings().
        """
        self._settings = settings or get_settings()
        self.store = store
        self._factory = factory or NotificationFactory(settings=self._settings.notifications)
        self.channels: dict[ChannelType, BaseChannel] = (
            dict(channels) if channels is not None
            else build_default_channels(store, self._settings)
        )
        self._default_locale = Locale(self._settings.notifications.default_locale)

        logger.info(
            "NotificationService initialized",
            channels=[c.value for c in self.channels],
            store=type(store).__name__,
        )

    async def notify_guardians(
        self,
        subject: AdmissionsSubject,
        stage: NotificationStage | str,
        context: Mapping[str, str] | None = None,
    ) -> FanOutResult:
        """Notify every eligible guardian of an application or lead.

        Args:
            subject: Application or lead the event is about.
            stage: Lifecycle stage.
            context: Stage-specific template values.

        Returns:
            FanOutResult with delivery details.

        Raises:
            UnknownStageError: If the stage has no template bundle.
            NotificationStoreError: If a finalized notification could not
                be stored.
        """
        bundle = self._factory.registry.resolve(stage)
        log = logger.bind(
            stage=bundle.stage.value,
            application_id=subject.application_id,
            lead_id=subject.lead_id,
        )

        guardians = list(subject.guardians)
        eligible = [g for g in guardians if g.can_receive_notifications]
        skipped = len(guardians) - len(eligible)

        if not eligible:
            log.info("No guardians eligible for notifications", skipped=skipped)
            return FanOutResult(
                stage=bundle.stage,
                eligible_count=0,
                skipped_count=skipped,
            )

        # Build everything first so a bad stage notifies nobody
        notifications = [
            self._factory.create(
                stage=bundle.stage,
                recipient=guardian,
                student_name=subject.student_name,
                context=context,
                application_id=subject.application_id,
                lead_id=subject.lead_id,
                locale=guardian.locale or self._default_locale,
            )
            for guardian in eligible
        ]

        outcomes = await asyncio.gather(
            *[self._deliver(notification) for notification in notifications],
            return_exceptions=True,
        )

        result = FanOutResult(
            stage=bundle.stage,
            eligible_count=len(eligible),
            skipped_count=skipped,
            notifications=notifications,
        )
        failures: list[BaseException] = []

        for notification, outcome in zip(notifications, outcomes):
            if isinstance(outcome, BaseException):
                failures.append(outcome)
                continue
            for channel_result in outcome:
                result.channel_results.append({
                    "notification_id": notification.id,
                    "recipient_id": notification.recipient_id,
                    **channel_result.to_dict(),
                })
                if not channel_result.succeeded:
                    result.errors.append(
                        f"{channel_result.channel.value} to {notification.recipient_id}: "
                        f"{channel_result.error_message}"
                    )

        log.info(
            "Fan-out completed",
            recipients=len(notifications),
            skipped=skipped,
            sent=result.sent_count,
            failed=result.failed_count,
            by_channel={
                channel.value: {status.value: n for status, n in counts.items()}
                for channel, counts in result.by_channel.items()
            },
        )

        if failures:
            for extra in failures[1:]:
                log.error("Additional fan-out failure", error=str(extra))
            raise failures[0]

        return result

    async def _deliver(self, notification: Notification) -> list[ChannelResult]:
        """Send one notification on all of its channels, then store it.

        Args:
            notification: Notification with every channel pending.

        Returns:
            One result per channel.

        Raises:
            NotificationStoreError: If the append fails.
        """
        results = await asyncio.gather(
            *[self._dispatch(channel, notification) for channel in notification.channels]
        )

        try:
            await self.store.append(notification)
        except NotificationStoreError:
            raise
        except Exception as e:
            raise NotificationStoreError(
                f"Failed to store notification {notification.id}", e
            ) from e

        return list(results)

    async def _dispatch(
        self,
        channel_type: ChannelType,
        notification: Notification,
    ) -> ChannelResult:
        """Run one channel and record its outcome on the notification.

        Args:
            channel_type: Channel to run.
            notification: Notification being delivered.

        Returns:
            The channel's result, FAILED if the channel is missing or raised.
        """
        dispatcher = self.channels.get(channel_type)

        if dispatcher is None:
            result = ChannelResult(
                channel=channel_type,
                status=DeliveryStatus.FAILED,
                error_message=f"No dispatcher registered for {channel_type.value}",
            )
        else:
            try:
                result = await dispatcher.send(notification)
            except Exception as e:
                logger.error(
                    "Channel dispatcher raised",
                    channel=channel_type.value,
                    recipient_id=notification.recipient_id,
                    error=str(e),
                    exc_info=True,
                )
                result = ChannelResult(
                    channel=channel_type,
                    status=DeliveryStatus.FAILED,
                    error_message=str(e),
                )

        # Each dispatch touches only its own status entry
        notification.record_delivery(channel_type, result.succeeded, result.sent_at)

        if not result.succeeded:
            logger.warning(
                "Channel delivery failed",
                channel=channel_type.value,
                notification_id=notification.id,
                recipient_id=notification.recipient_id,
                reason=result.error_message,
            )
        return result

    async def get(self, notification_id: str) -> Notification | None:
        """Get one notification by ID."""
        return await self.store.get(notification_id)

    async def list_by_recipient(self, recipient_id: str) -> list[Notification]:
        """List a guardian's notifications, oldest first."""
        return await self.store.list_by_recipient(recipient_id)

    async def unread_count(self, recipient_id: str) -> int:
        """Count a guardian's unread in-app notifications."""
        return await self.store.unread_count(recipient_id)

    async def mark_read(self, notification_id: str) -> bool:
        """Mark one notification as read."""
        return await self.store.mark_read(notification_id)

    async def mark_all_read(self, recipient_id: str) -> int:
        """Mark all of a guardian's notifications as read."""
        return await self.store.mark_all_read(recipient_id)

    async def aclose(self) -> None:
        """Release transports and the store's resources."""
        for channel in self.channels.values():
            await channel.aclose()
        await self.store.close()


async def create_notification_service(settings: Settings | None = None) -> NotificationService:
    """Build a NotificationService with the configured store backend.

    Args:
        settings: Application settings, defaults to get_settings().

    Returns:
        Ready-to-use NotificationService.
    """
    settings = settings or get_settings()

    store: NotificationStore
    if settings.notifications.store_backend == "sql":
        sql_store = SqlAlchemyNotificationStore.from_settings(settings.database)
        await sql_store.create_schema()
        store = sql_store
    else:
        store = InMemoryNotificationStore()

    return NotificationService(store=store, settings=settings)
