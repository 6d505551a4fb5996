# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the SQLAlchemy notification store.

Runs against an in-memory SQLite database through aiosqlite.
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from src.core.config.settings import DatabaseSettings
from src.infrastructure.notifications.errors import NotificationStoreError
from src.infrastructure.notifications.factory import NotificationFactory
from src.infrastructure.notifications.service import create_notification_service
from src.infrastructure.notifications.sql_store import SqlAlchemyNotificationStore
from src.infrastructure.notifications.types import (
    ChannelType,
    DeliveryStatus,
    Guardian,
    Locale,
    Notification,
    NotificationStage,
)

pytestmark = pytest.mark.integration

MEMORY_URL = "sqlite+aiosqlite:///:memory:"
BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def delivered(
    recipient_id: str = "guardian-1",
    in_app_delivered: bool = True,
    created_at: datetime | None = None,
) -> Notification:
    """Create a notification with every channel attempted."""
    notification = NotificationFactory().create(
        stage=NotificationStage.DECISION_ACCEPTED,
        recipient=Guardian(
            id=recipient_id,
            full_name="أحمد",
            email="ahmed@example.com",
            phone="+971501234567",
        ),
        student_name="ليلى",
        context={"grade": "Grade 6", "academicYear": "2026-2027"},
        application_id="APP-1",
        locale=Locale.AR,
    )
    if created_at is not None:
        notification.created_at = created_at
    for channel in notification.channels:
        ok = in_app_delivered if channel == ChannelType.IN_APP else channel != ChannelType.SMS
        notification.record_delivery(channel, ok)
    return notification


@pytest_asyncio.fixture
async def store() -> AsyncGenerator[SqlAlchemyNotificationStore, None]:
    """Create a store on a fresh in-memory database."""
    sql_store = SqlAlchemyNotificationStore.from_settings(DatabaseSettings(url=MEMORY_URL))
    await sql_store.create_schema()
    yield sql_store
    await sql_store.close()


class TestPersistence:
    """Tests for writing and reading notifications."""

    @pytest.mark.asyncio
    async def test_append_and_get(self, store) -> None:
        """Test that a stored notification comes back unchanged."""
        notification = delivered()

        await store.append(notification)
        fetched = await store.get(notification.id)

        assert fetched == notification
        assert fetched.status[ChannelType.SMS] == DeliveryStatus.FAILED
        assert fetched.title == notification.title

    @pytest.mark.asyncio
    async def test_get_unknown(self, store) -> None:
        """Test looking up a missing ID."""
        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_list_order_and_isolation(self, store) -> None:
        """Test per-recipient listing ordered by creation time."""
        late = delivered(created_at=BASE_TIME + timedelta(hours=1))
        early = delivered(created_at=BASE_TIME)
        tie = delivered(created_at=BASE_TIME + timedelta(hours=1))
        other = delivered("guardian-2")

        for notification in (late, early, tie, other):
            await store.append(notification)

        listed = await store.list_by_recipient("guardian-1")

        assert [n.id for n in listed] == [early.id, late.id, tie.id]

    @pytest.mark.asyncio
    async def test_duplicate_append(self, store) -> None:
        """Test that the same notification appended twice gives two records."""
        notification = delivered()

        await store.append(notification)
        await store.append(notification)

        assert len(await store.list_by_recipient("guardian-1")) == 2


class TestReadState:
    """Tests for read tracking in the database."""

    @pytest.mark.asyncio
    async def test_mark_read_persists(self, store) -> None:
        """Test that read state survives a reload."""
        notification = delivered()
        await store.append(notification)

        assert await store.mark_read(notification.id) is True

        fetched = await store.get(notification.id)
        assert fetched.status[ChannelType.IN_APP] == DeliveryStatus.READ
        assert fetched.read_at is not None
        assert await store.mark_read(notification.id) is False

    @pytest.mark.asyncio
    async def test_mark_read_unknown_and_failed(self, store) -> None:
        """Test no-op read marking."""
        failed = delivered(in_app_delivered=False)
        await store.append(failed)

        assert await store.mark_read("missing") is False
        assert await store.mark_read(failed.id) is False

    @pytest.mark.asyncio
    async def test_unread_and_mark_all(self, store) -> None:
        """Test counting and bulk read marking."""
        await store.append(delivered())
        await store.append(delivered())
        await store.append(delivered(in_app_delivered=False))
        await store.append(delivered("guardian-2"))

        assert await store.unread_count("guardian-1") == 2
        assert await store.mark_all_read("guardian-1") == 2
        assert await store.unread_count("guardian-1") == 0
        assert await store.unread_count("guardian-2") == 1

    @pytest.mark.asyncio
    async def test_duplicate_records_share_read_state(self, store) -> None:
        """Test that reading a notification clears every stored copy."""
        notification = delivered()
        await store.append(notification)
        await store.append(notification)
        assert await store.unread_count("guardian-1") == 2

        assert await store.mark_all_read("guardian-1") == 1

        assert await store.unread_count("guardian-1") == 0
        assert await store.mark_read(notification.id) is False


class TestAvailability:
    """Tests for ping and error wrapping."""

    @pytest.mark.asyncio
    async def test_ping(self, store) -> None:
        """Test a reachable database."""
        assert await store.ping() is True

    @pytest.mark.asyncio
    async def test_missing_table_raises_store_error(self) -> None:
        """Test that database errors surface as NotificationStoreError."""
        engine = create_async_engine(MEMORY_URL)
        store = SqlAlchemyNotificationStore(engine)

        with pytest.raises(NotificationStoreError):
            await store.append(delivered())

        await engine.dispose()

    @pytest.mark.asyncio
    async def test_borrowed_engine_not_disposed(self) -> None:
        """Test that close() leaves a caller-owned engine usable."""
        engine = create_async_engine(MEMORY_URL)
        store = SqlAlchemyNotificationStore(engine)

        await store.close()

        assert await store.ping() is True
        await engine.dispose()


@pytest.mark.asyncio
async def test_service_with_sql_backend(settings, subject) -> None:
    """Test a full fan-out persisted through the SQL backend."""
    settings.notifications.store_backend = "sql"
    service = await create_notification_service(settings)

    try:
        assert isinstance(service.store, SqlAlchemyNotificationStore)
        await service.notify_guardians(subject, NotificationStage.APPLICATION_SUBMITTED)

        stored = await service.list_by_recipient("guardian-ahmed")
        assert len(stored) == 1
        assert stored[0].status[ChannelType.IN_APP] == DeliveryStatus.SENT
        assert await service.unread_count("guardian-ahmed") == 1
    finally:
        await service.aclose()
