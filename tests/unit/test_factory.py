# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for NotificationFactory."""

import pytest

from src.core.config.settings import NotificationSettings
from src.infrastructure.notifications.errors import UnknownStageError
from src.infrastructure.notifications.factory import NotificationFactory
from src.infrastructure.notifications.types import (
    ChannelType,
    DeliveryStatus,
    Guardian,
    Locale,
    NotificationPriority,
    NotificationStage,
)


@pytest.fixture
def factory() -> NotificationFactory:
    """Create a factory with explicit organization constants."""
    return NotificationFactory(
        settings=NotificationSettings(
            school_name="Moazzez School",
            school_phone="+971-4-555-0100",
        ),
    )


class TestBuildVariables:
    """Tests for substitution variable assembly."""

    def test_base_variables(self, factory, guardian_ahmed) -> None:
        """Test the variables every stage can use."""
        variables = factory.build_variables(
            recipient=guardian_ahmed,
            student_name="Layla",
            application_id="APP-1",
        )

        assert variables == {
            "studentName": "Layla",
            "applicationId": "APP-1",
            "leadId": "",
            "guardianName": "Ahmed Al Mansouri",
            "schoolName": "Moazzez School",
            "schoolPhone": "+971-4-555-0100",
        }

    def test_context_wins_on_collision(self, factory, guardian_ahmed) -> None:
        """Test that caller context overrides base variables."""
        variables = factory.build_variables(
            recipient=guardian_ahmed,
            student_name="Layla",
            context={"studentName": "Layla A.", "grade": "Grade 6"},
        )

        assert variables["studentName"] == "Layla A."
        assert variables["grade"] == "Grade 6"


class TestCreate:
    """Tests for NotificationFactory.create()."""

    def test_decision_accepted_english(self, factory, guardian_ahmed) -> None:
        """Test a fully rendered acceptance notification."""
        notification = factory.create(
            stage=NotificationStage.DECISION_ACCEPTED,
            recipient=guardian_ahmed,
            student_name="Layla",
            context={
                "grade": "Grade 6",
                "academicYear": "2026-2027",
                "enrollmentDeadline": "March 15, 2026",
            },
            application_id="APP-2026-001",
        )

        assert notification.title == "🎉 Congratulations! Application Accepted"
        assert notification.message == (
            "Congratulations! We are pleased to inform you that Layla has been "
            "accepted for Grade 6 for the 2026-2027 academic year. Please complete "
            "the enrollment process by March 15, 2026."
        )
        assert notification.email_subject == "🎉 Acceptance Letter - Layla (APP-2026-001)"
        assert notification.sms_message == (
            "Congratulations! Layla accepted for Grade 6. Complete enrollment by March 15, 2026."
        )
        assert notification.priority == NotificationPriority.HIGH
        assert notification.channels == (ChannelType.IN_APP, ChannelType.EMAIL, ChannelType.SMS)

    def test_every_channel_starts_pending(self, factory, guardian_ahmed) -> None:
        """Test the initial status map."""
        notification = factory.create(
            stage=NotificationStage.UNDER_REVIEW,
            recipient=guardian_ahmed,
            student_name="Layla",
        )

        assert notification.status == {
            ChannelType.IN_APP: DeliveryStatus.PENDING,
            ChannelType.EMAIL: DeliveryStatus.PENDING,
        }
        assert notification.sent_at == {}
        assert notification.read_at is None

    def test_recipient_snapshot(self, factory, guardian_ahmed) -> None:
        """Test that recipient contact data is captured on the notification."""
        notification = factory.create(
            stage=NotificationStage.LEAD_CONTACTED,
            recipient=guardian_ahmed,
            student_name="Layla",
            lead_id="LEAD-7",
        )

        assert notification.recipient_id == "guardian-ahmed"
        assert notification.recipient_name == "Ahmed Al Mansouri"
        assert notification.recipient_email == "ahmed@example.com"
        assert notification.recipient_phone == "+971501234567"
        assert notification.lead_id == "LEAD-7"
        assert notification.application_id is None

    def test_arabic_locale(self, factory, guardian_fatima) -> None:
        """Test Arabic rendering."""
        notification = factory.create(
            stage=NotificationStage.APPLICATION_SUBMITTED,
            recipient=guardian_fatima,
            student_name="ليلى",
            application_id="APP-9",
            locale=Locale.AR,
        )

        assert notification.locale == Locale.AR
        assert notification.title == "تم استلام الطلب بنجاح"
        assert "APP-9" in notification.message
        assert "ليلى" in notification.message

    def test_plain_string_locale(self, factory) -> None:
        """Test that locale codes from guardian records are accepted."""
        guardian = Guardian(id="g-1", full_name="فاطمة", email="f@example.com", locale="ar")

        notification = factory.create(
            stage=NotificationStage.APPLICATION_SUBMITTED,
            recipient=guardian,
            student_name="ليلى",
            locale=guardian.locale,
        )
        by_code = factory.create(
            stage=NotificationStage.APPLICATION_SUBMITTED,
            recipient=guardian,
            student_name="ليلى",
            locale="ar",
        )

        assert notification.locale is Locale.AR
        assert by_code.locale is Locale.AR
        assert by_code.to_dict()["language"] == "ar"

    def test_unsupported_locale_rejected(self, factory, guardian_ahmed) -> None:
        """Test a locale code with no templates."""
        with pytest.raises(ValueError):
            factory.create(
                stage=NotificationStage.APPLICATION_SUBMITTED,
                recipient=guardian_ahmed,
                student_name="Layla",
                locale="fr",
            )

    def test_missing_context_left_visible(self, factory, guardian_ahmed) -> None:
        """Test that absent stage values keep their placeholder."""
        notification = factory.create(
            stage=NotificationStage.DECISION_WAITLISTED,
            recipient=guardian_ahmed,
            student_name="Layla",
        )

        assert "{waitlistPosition}" in notification.message

    def test_data_holds_variables(self, factory, guardian_ahmed) -> None:
        """Test that the variables used for rendering are kept."""
        notification = factory.create(
            stage=NotificationStage.DOCUMENTS_PENDING,
            recipient=guardian_ahmed,
            student_name="Layla",
            context={"missingDocuments": "Passport, Birth certificate"},
        )

        assert notification.data["missingDocuments"] == "Passport, Birth certificate"
        assert notification.data["studentName"] == "Layla"

    def test_unknown_stage_raises(self, factory, guardian_ahmed) -> None:
        """Test that an unknown stage raises before anything is built."""
        with pytest.raises(UnknownStageError):
            factory.create(
                stage="graduated",
                recipient=guardian_ahmed,
                student_name="Layla",
            )

    def test_ids_are_unique(self, factory, guardian_ahmed) -> None:
        """Test that each notification gets its own ID."""
        first = factory.create(NotificationStage.UNDER_REVIEW, guardian_ahmed, "Layla")
        second = factory.create(NotificationStage.UNDER_REVIEW, guardian_ahmed, "Layla")

        assert first.id != second.id


def test_guardian_name_variable_for_minimal_guardian(factory) -> None:
    """Test a guardian with only an ID and name."""
    guardian = Guardian(id="g-1", full_name="Sara")

    notification = factory.create(NotificationStage.LEAD_CREATED, guardian, "Omar")

    assert notification.data["guardianName"] == "Sara"
    assert notification.recipient_email is None
    assert notification.recipient_phone is None
