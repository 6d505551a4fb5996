# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared types for admissions notifications.

Defines the closed enumerations (stage, channel, status, priority,
locale), the inbound guardian and admissions subject records, and the
Notification record itself.

A Notification is fixed at creation except for three things: the
per-channel status map, the per-channel sent timestamps and the read
timestamp. Those only move along the delivery state machine:

    pending -> sent -> read   (read only for in_app)
    pending -> failed
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from src.infrastructure.notifications.errors import InvalidStatusTransitionError
from src.utils.datetime import format_iso, parse_iso, utc_now


class NotificationStage(str, Enum):
    """Admissions lifecycle milestones that trigger notifications."""

    LEAD_CREATED = "lead_created"
    LEAD_CONTACTED = "lead_contacted"
    APPLICATION_SUBMITTED = "application_submitted"
    DOCUMENTS_PENDING = "documents_pending"
    DOCUMENTS_COMPLETE = "documents_complete"
    TEST_SCHEDULED = "test_scheduled"
    TEST_COMPLETED = "test_completed"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_COMPLETED = "interview_completed"
    UNDER_REVIEW = "under_review"
    DECISION_ACCEPTED = "decision_accepted"
    DECISION_WAITLISTED = "decision_waitlisted"
    DECISION_REJECTED = "decision_rejected"
    ENROLLMENT_COMPLETE = "enrollment_complete"


class ChannelType(str, Enum):
    """Available notification channel types."""

    IN_APP = "in_app"
    EMAIL = "email"
    SMS = "sms"


class DeliveryStatus(str, Enum):
    """Delivery status for a channel."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    READ = "read"


class NotificationPriority(str, Enum):
    """Priority carried over from the template bundle."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Locale(str, Enum):
    """Supported content locales."""

    EN = "en"
    AR = "ar"


@dataclass
class Guardian:
    """A guardian attached to an application or lead.

    Attributes:
        id: Recipient identifier.
        full_name: Display name.
        email: Email address (for email channel).
        phone: Primary phone number (for SMS channel).
        can_receive_notifications: Whether this guardian takes part in fan-out.
        locale: Preferred content locale, None for the configured fallback.
    """

    id: str
    full_name: str
    email: str | None = None
    phone: str | None = None
    can_receive_notifications: bool = True
    locale: Locale | None = None

    def __post_init__(self) -> None:
        # Accept plain locale codes such as "ar"
        self.locale = Locale(self.locale) if self.locale else None


@dataclass
class AdmissionsSubject:
    """The application or lead a lifecycle event is about.

    Attributes:
        student_name: Student display name used in every template.
        guardians: Guardians linked to the application or lead.
        application_id: Application identifier, if one exists yet.
        lead_id: Lead identifier, if the event comes from the lead pipeline.
    """

    student_name: str
    guardians: list[Guardian] = field(default_factory=list)
    application_id: str | None = None
    lead_id: str | None = None


@dataclass
class Notification:
    """One guardian's notification for one lifecycle event.

    Attributes:
        recipient_id: Guardian ID.
        recipient_name: Guardian name captured at creation.
        recipient_email: Guardian email captured at creation.
        recipient_phone: Guardian phone captured at creation.
        student_name: Student display name.
        stage: Lifecycle stage that produced this notification.
        channels: Channels copied from the stage's template bundle.
        status: Delivery status per channel.
        title: Rendered title.
        message: Rendered body.
        email_subject: Rendered email subject line.
        sms_message: Rendered SMS text.
        priority: Priority copied from the template bundle.
        locale: Locale the content was rendered in.
        data: Substitution variables used for rendering.
        application_id: Related application, if any.
        lead_id: Related lead, if any.
        id: Unique notification ID.
        created_at: Creation time (UTC).
        sent_at: Per-channel time of successful delivery.
        read_at: When the guardian read the in-app notification.
    """

    recipient_id: str
    recipient_name: str
    recipient_email: str | None
    recipient_phone: str | None
    student_name: str
    stage: NotificationStage
    channels: tuple[ChannelType, ...]
    status: dict[ChannelType, DeliveryStatus]
    title: str
    message: str
    email_subject: str
    sms_message: str
    priority: NotificationPriority
    locale: Locale
    data: dict[str, str] = field(default_factory=dict)
    application_id: str | None = None
    lead_id: str | None = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utc_now)
    sent_at: dict[ChannelType, datetime] = field(default_factory=dict)
    read_at: datetime | None = None

    def __post_init__(self) -> None:
        if set(self.status) != set(self.channels):
            raise InvalidStatusTransitionError(
                f"Status map channels {sorted(c.value for c in self.status)} "
                f"do not match notification channels {sorted(c.value for c in self.channels)}"
            )

    @property
    def is_unread(self) -> bool:
        """True when the in-app copy was delivered but not read yet."""
        return self.status.get(ChannelType.IN_APP) == DeliveryStatus.SENT

    def record_delivery(
        self,
        channel: ChannelType,
        delivered: bool,
        at: datetime | None = None,
    ) -> None:
        """Move one channel from pending to its terminal delivery state.

        Args:
            channel: Channel that finished its attempt.
            delivered: Whether the channel reported success.
            at: Delivery time, defaults to now.

        Raises:
            InvalidStatusTransitionError: If the channel is not part of this
                notification or already left pending.
        """
        current = self.status.get(channel)
        if current is None:
            raise InvalidStatusTransitionError(
                f"Channel {channel.value} is not used by notification {self.id}"
            )
        if current != DeliveryStatus.PENDING:
            raise InvalidStatusTransitionError(
                f"Channel {channel.value} of notification {self.id} is already {current.value}"
            )

        if delivered:
            self.status[channel] = DeliveryStatus.SENT
            self.sent_at[channel] = at or utc_now()
        else:
            self.status[channel] = DeliveryStatus.FAILED

    def mark_read(self, at: datetime | None = None) -> bool:
        """Flip the in-app channel from sent to read.

        Anything other than a delivered, unread in-app copy is left alone.

        Args:
            at: Read time, defaults to now.

        Returns:
            True if the notification changed.
        """
        if not self.is_unread:
            return False
        self.status[ChannelType.IN_APP] = DeliveryStatus.READ
        self.read_at = at or utc_now()
        return True

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted record shape.

        Returns:
            Dictionary with camelCase keys and ISO-8601 timestamps.
        """
        return {
            "id": self.id,
            "recipientId": self.recipient_id,
            "recipientName": self.recipient_name,
            "recipientEmail": self.recipient_email,
            "recipientPhone": self.recipient_phone,
            "studentName": self.student_name,
            "applicationId": self.application_id,
            "leadId": self.lead_id,
            "stage": self.stage.value,
            "channels": [c.value for c in self.channels],
            "status": {c.value: s.value for c, s in self.status.items()},
            "title": self.title,
            "message": self.message,
            "emailSubject": self.email_subject,
            "smsMessage": self.sms_message,
            "priority": self.priority.value,
            "data": dict(self.data),
            "createdAt": format_iso(self.created_at),
            "sentAt": {c.value: format_iso(t) for c, t in self.sent_at.items()} or None,
            "readAt": format_iso(self.read_at),
            "language": self.locale.value,
        }

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> "Notification":
        """Rebuild a notification from its persisted record shape.

        Args:
            record: Dictionary produced by to_dict().

        Returns:
            Notification instance.
        """
        return cls(
            id=record["id"],
            recipient_id=record["recipientId"],
            recipient_name=record["recipientName"],
            recipient_email=record.get("recipientEmail"),
            recipient_phone=record.get("recipientPhone"),
            student_name=record["studentName"],
            application_id=record.get("applicationId"),
            lead_id=record.get("leadId"),
            stage=NotificationStage(record["stage"]),
            channels=tuple(ChannelType(c) for c in record["channels"]),
            status={ChannelType(c): DeliveryStatus(s) for c, s in record["status"].items()},
            title=record["title"],
            message=record["message"],
            email_subject=record.get("emailSubject", ""),
            sms_message=record.get("smsMessage", ""),
            priority=NotificationPriority(record.get("priority", NotificationPriority.MEDIUM.value)),
            data=dict(record.get("data") or {}),
            created_at=parse_iso(record["createdAt"]),
            sent_at={
                ChannelType(c): parse_iso(t)
                for c, t in (record.get("sentAt") or {}).items()
            },
            read_at=parse_iso(record.get("readAt")),
            locale=Locale(record.get("language", Locale.EN.value)),
        )
