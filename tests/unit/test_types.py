# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the Notification record and its delivery state machine."""

from datetime import datetime, timezone

import pytest

from src.infrastructure.notifications.errors import InvalidStatusTransitionError
from src.infrastructure.notifications.types import (
    ChannelType,
    DeliveryStatus,
    Guardian,
    Locale,
    Notification,
    NotificationPriority,
    NotificationStage,
)


def make_notification(
    channels: tuple[ChannelType, ...] = (ChannelType.IN_APP, ChannelType.EMAIL),
    **overrides,
) -> Notification:
    """Build a pending notification for state machine tests."""
    fields = dict(
        recipient_id="guardian-1",
        recipient_name="Ahmed",
        recipient_email="ahmed@example.com",
        recipient_phone=None,
        student_name="Layla",
        stage=NotificationStage.UNDER_REVIEW,
        channels=channels,
        status={c: DeliveryStatus.PENDING for c in channels},
        title="Application Under Review",
        message="Layla's application is under review.",
        email_subject="Under Review",
        sms_message="Under review",
        priority=NotificationPriority.MEDIUM,
        locale=Locale.EN,
        application_id="APP-1",
    )
    fields.update(overrides)
    return Notification(**fields)


class TestConstruction:
    """Tests for Notification invariants at creation."""

    def test_status_must_match_channels(self) -> None:
        """Test that a status entry for an unused channel is rejected."""
        with pytest.raises(InvalidStatusTransitionError):
            make_notification(
                channels=(ChannelType.IN_APP,),
                status={
                    ChannelType.IN_APP: DeliveryStatus.PENDING,
                    ChannelType.SMS: DeliveryStatus.PENDING,
                },
            )

    def test_created_at_is_utc(self) -> None:
        """Test the default creation timestamp."""
        notification = make_notification()

        assert notification.created_at.tzinfo is not None
        assert notification.created_at.utcoffset().total_seconds() == 0


class TestRecordDelivery:
    """Tests for pending -> sent / failed transitions."""

    def test_success_marks_sent_and_stamps_time(self) -> None:
        """Test a successful channel attempt."""
        notification = make_notification()
        at = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

        notification.record_delivery(ChannelType.EMAIL, True, at)

        assert notification.status[ChannelType.EMAIL] == DeliveryStatus.SENT
        assert notification.sent_at[ChannelType.EMAIL] == at
        assert notification.status[ChannelType.IN_APP] == DeliveryStatus.PENDING

    def test_failure_marks_failed_without_timestamp(self) -> None:
        """Test a failed channel attempt."""
        notification = make_notification()

        notification.record_delivery(ChannelType.EMAIL, False)

        assert notification.status[ChannelType.EMAIL] == DeliveryStatus.FAILED
        assert ChannelType.EMAIL not in notification.sent_at

    def test_second_attempt_rejected(self) -> None:
        """Test that a channel leaves pending only once."""
        notification = make_notification()
        notification.record_delivery(ChannelType.EMAIL, False)

        with pytest.raises(InvalidStatusTransitionError):
            notification.record_delivery(ChannelType.EMAIL, True)

    def test_unused_channel_rejected(self) -> None:
        """Test recording a channel the notification does not use."""
        notification = make_notification()

        with pytest.raises(InvalidStatusTransitionError):
            notification.record_delivery(ChannelType.SMS, True)


class TestMarkRead:
    """Tests for sent -> read on the in-app channel."""

    def test_delivered_in_app_becomes_read(self) -> None:
        """Test marking a delivered notification as read."""
        notification = make_notification()
        notification.record_delivery(ChannelType.IN_APP, True)

        assert notification.is_unread is True
        assert notification.mark_read() is True
        assert notification.status[ChannelType.IN_APP] == DeliveryStatus.READ
        assert notification.read_at is not None
        assert notification.is_unread is False

    def test_mark_read_is_idempotent(self) -> None:
        """Test that a second mark_read changes nothing."""
        notification = make_notification()
        notification.record_delivery(ChannelType.IN_APP, True)
        notification.mark_read()
        first_read_at = notification.read_at

        assert notification.mark_read() is False
        assert notification.read_at == first_read_at

    def test_pending_or_failed_not_marked(self) -> None:
        """Test that undelivered copies cannot be read."""
        pending = make_notification()
        failed = make_notification()
        failed.record_delivery(ChannelType.IN_APP, False)

        assert pending.mark_read() is False
        assert failed.mark_read() is False
        assert failed.status[ChannelType.IN_APP] == DeliveryStatus.FAILED

    def test_without_in_app_channel(self) -> None:
        """Test a notification that never had an in-app copy."""
        notification = make_notification(channels=(ChannelType.EMAIL,))

        assert notification.is_unread is False
        assert notification.mark_read() is False


class TestSerialization:
    """Tests for the persisted record shape."""

    def test_to_dict_uses_record_keys(self) -> None:
        """Test camelCase keys and enum values."""
        notification = make_notification()
        notification.record_delivery(ChannelType.IN_APP, True)

        record = notification.to_dict()

        assert record["recipientId"] == "guardian-1"
        assert record["stage"] == "under_review"
        assert record["status"] == {"in_app": "sent", "email": "pending"}
        assert record["language"] == "en"
        assert record["readAt"] is None
        assert set(record["sentAt"]) == {"in_app"}

    def test_sent_at_absent_before_delivery(self) -> None:
        """Test sentAt is None while nothing was delivered."""
        assert make_notification().to_dict()["sentAt"] is None

    def test_from_dict_restores_state(self) -> None:
        """Test that a stored record rebuilds an equal notification."""
        notification = make_notification(data={"studentName": "Layla"})
        notification.record_delivery(ChannelType.IN_APP, True)
        notification.record_delivery(ChannelType.EMAIL, False)
        notification.mark_read()

        restored = Notification.from_dict(notification.to_dict())

        assert restored == notification


class TestGuardian:
    """Tests for Guardian locale handling."""

    def test_locale_code_becomes_enum(self) -> None:
        """Test that a plain locale code is normalized."""
        guardian = Guardian(id="g-1", full_name="Fatima", locale="ar")

        assert guardian.locale is Locale.AR

    def test_empty_locale_means_fallback(self) -> None:
        """Test that a blank locale falls back to the configured default."""
        assert Guardian(id="g-1", full_name="Fatima", locale="").locale is None
        assert Guardian(id="g-1", full_name="Fatima").locale is None

    def test_unsupported_locale_rejected(self) -> None:
        """Test a locale code with no templates."""
        with pytest.raises(ValueError):
            Guardian(id="g-1", full_name="Fatima", locale="fr")
