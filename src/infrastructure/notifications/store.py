# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification store and read-state tracking.

The store is the only state shared between concurrent fan-outs. It
records finalized notifications, serves them per recipient in creation
order and owns the in-app read state.

Two implementations exist:
- InMemoryNotificationStore (this module): process-local, used in
  development and tests.
- SqlAlchemyNotificationStore (sql_store): durable, SQLAlchemy async.
"""

import asyncio
import copy
import logging
from abc import ABC, abstractmethod

from src.infrastructure.notifications.types import Notification

logger = logging.getLogger(__name__)


class NotificationStore(ABC):
    """Persistence and read-state interface for notifications.

    Appends never deduplicate: appending the same notification twice
    produces two records. Lookups by ID return the latest record, and
    read state changes apply to every record with that ID.
    """

    @abstractmethod
    async def append(self, notification: Notification) -> None:
        """Record a finalized notification.

        Args:
            notification: Notification to store.

        Raises:
            NotificationStoreError: If the record could not be written.
        """
        ...

    @abstractmethod
    async def get(self, notification_id: str) -> Notification | None:
        """Get a notification by ID.

        Args:
            notification_id: Notification ID.

        Returns:
            The notification, or None if unknown.
        """
        ...

    @abstractmethod
    async def list_by_recipient(self, recipient_id: str) -> list[Notification]:
        """List a recipient's notifications, oldest first.

        Args:
            recipient_id: Guardian ID.

        Returns:
            Notifications ordered by creation time, ties in append order.
        """
        ...

    @abstractmethod
    async def mark_read(self, notification_id: str) -> bool:
        """Mark a delivered in-app notification as read.

        Flips every record with this ID whose in-app copy is sent. No-op
        when the in-app copy is already read, still pending, failed,
        absent, or when the ID is unknown.

        Args:
            notification_id: Notification ID.

        Returns:
            True if any record changed.
        """
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """Check whether the store can take writes.

        Returns:
            True if the store is available.
        """
        ...

    async def close(self) -> None:
        """Release connections held by the store."""
        return None

    async def mark_all_read(self, recipient_id: str) -> int:
        """Mark every unread notification of a recipient as read.

        Args:
            recipient_id: Guardian ID.

        Returns:
            Number of distinct notification IDs that changed.
        """
        unread_ids = dict.fromkeys(
            n.id for n in await self.list_by_recipient(recipient_id) if n.is_unread
        )
        changed = 0
        for notification_id in unread_ids:
            if await self.mark_read(notification_id):
                changed += 1
        return changed

    async def unread_count(self, recipient_id: str) -> int:
        """Count a recipient's delivered but unread in-app notifications.

        Notifications whose in-app channel is pending or failed never
        reached the guardian and are not counted.

        Args:
            recipient_id: Guardian ID.

        Returns:
            Unread count.
        """
        notifications = await self.list_by_recipient(recipient_id)
        return sum(1 for notification in notifications if notification.is_unread)


class InMemoryNotificationStore(NotificationStore):
    """Process-local notification store.

    Records are copied on the way in and on the way out, so callers
    holding a Notification cannot change stored state except through
    mark_read.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._records: list[Notification] = []
        self._by_id: dict[str, list[Notification]] = {}
        self._lock = asyncio.Lock()

    async def append(self, notification: Notification) -> None:
        """Record a finalized notification."""
        record = copy.deepcopy(notification)
        async with self._lock:
            self._records.append(record)
            self._by_id.setdefault(record.id, []).append(record)
        logger.debug(
            "Stored notification %s for recipient %s",
            record.id,
            record.recipient_id,
        )

    async def get(self, notification_id: str) -> Notification | None:
        """Get a notification by ID."""
        records = self._by_id.get(notification_id)
        return copy.deepcopy(records[-1]) if records else None

    async def list_by_recipient(self, recipient_id: str) -> list[Notification]:
        """List a recipient's notifications, oldest first."""
        matches = [r for r in self._records if r.recipient_id == recipient_id]
        # sorted() is stable, so equal timestamps keep append order
        return [copy.deepcopy(r) for r in sorted(matches, key=lambda r: r.created_at)]

    async def mark_read(self, notification_id: str) -> bool:
        """Mark a delivered in-app notification as read."""
        async with self._lock:
            records = self._by_id.get(notification_id)
            if not records:
                logger.debug("mark_read ignored unknown notification %s", notification_id)
                return False
            # Duplicate appends share one read state
            flipped = [record.mark_read() for record in records]
            return any(flipped)

    async def ping(self) -> bool:
        """The in-memory store is always available."""
        return True
