# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests (SQLite via aiosqlite, FastAPI TestClient)
"""

from collections.abc import Generator

import pytest

from src.core.config.settings import (
    DatabaseSettings,
    NotificationSettings,
    Settings,
    SMSSettings,
    SMTPSettings,
    clear_settings_cache,
)
from src.infrastructure.events import reset_event_bus
from src.infrastructure.notifications.types import AdmissionsSubject, Guardian, Locale


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (SQLite, HTTP app)"
    )


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_global_state() -> Generator[None, None, None]:
    """Reset cached settings and the event bus around every test."""
    clear_settings_cache()
    reset_event_bus()
    yield
    clear_settings_cache()
    reset_event_bus()


@pytest.fixture
def settings() -> Settings:
    """Provide settings with no email or SMS transport configured."""
    return Settings(
        environment="development",
        debug=True,
        log_level="DEBUG",
        notifications=NotificationSettings(
            default_locale="en",
            school_name="Moazzez School",
            school_phone="+971-4-XXX-XXXX",
            store_backend="memory",
        ),
        database=DatabaseSettings(url="sqlite+aiosqlite:///:memory:"),
        smtp=SMTPSettings(host=None, username=None, password=None, from_email=None),
        sms=SMSSettings(gateway_url=None, api_key=None),
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def guardian_ahmed() -> Guardian:
    """Guardian with every contact channel available."""
    return Guardian(
        id="guardian-ahmed",
        full_name="Ahmed Al Mansouri",
        email="ahmed@example.com",
        phone="+971501234567",
        locale=Locale.EN,
    )


@pytest.fixture
def guardian_fatima() -> Guardian:
    """Arabic-speaking guardian without a phone number."""
    return Guardian(
        id="guardian-fatima",
        full_name="Fatima Al Mansouri",
        email="fatima@example.com",
        phone=None,
        locale=Locale.AR,
    )


@pytest.fixture
def guardian_opted_out() -> Guardian:
    """Guardian who does not receive notifications."""
    return Guardian(
        id="guardian-omar",
        full_name="Omar Al Mansouri",
        email="omar@example.com",
        phone="+971509999999",
        can_receive_notifications=False,
    )


@pytest.fixture
def subject(guardian_ahmed: Guardian) -> AdmissionsSubject:
    """Application with a single eligible guardian."""
    return AdmissionsSubject(
        student_name="Layla",
        guardians=[guardian_ahmed],
        application_id="APP-2026-001",
    )
