# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the notification HTTP API."""

import asyncio
from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.infrastructure.notifications.errors import NotificationStoreError
from src.infrastructure.notifications.service import NotificationService
from src.infrastructure.notifications.store import InMemoryNotificationStore
from src.infrastructure.notifications.types import NotificationStage

pytestmark = pytest.mark.integration


@pytest.fixture
def service(settings, subject) -> NotificationService:
    """Create a service with two notifications for guardian-ahmed."""
    service = NotificationService(store=InMemoryNotificationStore(), settings=settings)

    async def seed() -> None:
        await service.notify_guardians(subject, NotificationStage.APPLICATION_SUBMITTED)
        await service.notify_guardians(subject, NotificationStage.UNDER_REVIEW)

    asyncio.run(seed())
    return service


@pytest.fixture
def client(settings, service) -> Generator[TestClient, None, None]:
    """Create a test client running the app lifespan."""
    app = create_app(settings=settings, service=service)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def broken_client(settings) -> Generator[TestClient, None, None]:
    """Create a test client whose store fails every call."""
    store = AsyncMock()
    error = NotificationStoreError("database unreachable")
    store.get.side_effect = error
    store.list_by_recipient.side_effect = error
    store.unread_count.side_effect = error
    store.mark_all_read.side_effect = error
    store.ping.return_value = False
    service = NotificationService(store=store, channels={}, settings=settings)

    app = create_app(settings=settings, service=service)
    with TestClient(app) as test_client:
        yield test_client


class TestListNotifications:
    """Tests for GET /api/v1/guardians/{recipient_id}/notifications."""

    def test_lists_oldest_first(self, client) -> None:
        """Test the guardian's inbox."""
        response = client.get("/api/v1/guardians/guardian-ahmed/notifications")

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert body["unread"] == 2
        stages = [n["stage"] for n in body["notifications"]]
        assert stages == ["application_submitted", "under_review"]
        first = body["notifications"][0]
        assert first["title"] == "Application Received Successfully"
        assert first["status"]["in_app"] == "sent"
        assert first["status"]["email"] == "failed"
        assert first["is_unread"] is True

    def test_unknown_guardian_has_empty_inbox(self, client) -> None:
        """Test a guardian with no notifications."""
        response = client.get("/api/v1/guardians/nobody/notifications")

        assert response.status_code == 200
        assert response.json() == {"notifications": [], "total": 0, "unread": 0}


class TestReadState:
    """Tests for the read-state endpoints."""

    def test_unread_count(self, client) -> None:
        """Test the unread counter."""
        response = client.get("/api/v1/guardians/guardian-ahmed/notifications/unread-count")

        assert response.status_code == 200
        assert response.json() == {"recipient_id": "guardian-ahmed", "unread": 2}

    def test_mark_one_read(self, client) -> None:
        """Test marking a single notification."""
        inbox = client.get("/api/v1/guardians/guardian-ahmed/notifications").json()
        notification_id = inbox["notifications"][0]["id"]

        response = client.post(f"/api/v1/notifications/{notification_id}/read")

        assert response.status_code == 200
        assert response.json() == {"id": notification_id, "changed": True}
        again = client.post(f"/api/v1/notifications/{notification_id}/read")
        assert again.json()["changed"] is False
        count = client.get("/api/v1/guardians/guardian-ahmed/notifications/unread-count")
        assert count.json()["unread"] == 1

    def test_mark_unknown_read_is_404(self, client) -> None:
        """Test marking a notification that does not exist."""
        response = client.post("/api/v1/notifications/does-not-exist/read")

        assert response.status_code == 404

    def test_mark_all_read(self, client) -> None:
        """Test bulk read marking."""
        response = client.post("/api/v1/guardians/guardian-ahmed/notifications/read-all")

        assert response.status_code == 200
        assert response.json() == {"recipient_id": "guardian-ahmed", "marked": 2}
        count = client.get("/api/v1/guardians/guardian-ahmed/notifications/unread-count")
        assert count.json()["unread"] == 0


class TestStoreFailures:
    """Tests for store errors surfacing as 503."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/api/v1/guardians/g-1/notifications"),
            ("get", "/api/v1/guardians/g-1/notifications/unread-count"),
            ("post", "/api/v1/notifications/n-1/read"),
            ("post", "/api/v1/guardians/g-1/notifications/read-all"),
        ],
    )
    def test_store_error_is_503(self, broken_client, method, path) -> None:
        """Test every endpoint against a failing store."""
        response = getattr(broken_client, method)(path)

        assert response.status_code == 503
        assert response.json()["detail"] == "Notification store unavailable"


class TestHealth:
    """Tests for GET /health."""

    def test_healthy(self, client) -> None:
        """Test health with a reachable store."""
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["store"]["status"] == "healthy"
        assert body["environment"] == "development"

    def test_unhealthy_store(self, broken_client) -> None:
        """Test health when the store reports itself unavailable."""
        response = broken_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"


def test_service_missing_is_503(settings) -> None:
    """Test requests served before the lifespan ran."""
    client = TestClient(create_app(settings=settings, service=NotificationService(
        store=InMemoryNotificationStore(), settings=settings,
    )))

    response = client.get("/api/v1/guardians/g-1/notifications")

    assert response.status_code == 503
