# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-app notification channel.

In-app delivery is a local write: the notification becomes visible in
the guardian's notification panel once the fan-out appends it to the
store. The channel therefore succeeds whenever the store is reachable
and fails only when the store reports itself unavailable.
"""

from typing import TYPE_CHECKING

from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
)
from src.infrastructure.notifications.types import ChannelType, Notification

if TYPE_CHECKING:
    from src.infrastructure.notifications.store import NotificationStore


class InAppChannel(BaseChannel):
    """In-app notification channel backed by the notification store."""

    def __init__(self, store: "NotificationStore") -> None:
        """Initialize the in-app channel.

        Args:
            store: Store the fan-out appends delivered notifications to.
        """
        super().__init__()
        self._store = store

    @property
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        return ChannelType.IN_APP

    async def send(self, notification: Notification) -> ChannelResult:
        """Confirm the notification can be written to the store.

        Args:
            notification: The notification to deliver.

        Returns:
            ChannelResult with delivery status.
        """
        try:
            available = await self._store.ping()
        except Exception as e:
            self.logger.error(
                "Notification store check failed for %s: %s",
                notification.recipient_id,
                str(e),
                exc_info=True,
            )
            return self.create_failure_result(f"Store error: {str(e)}")

        if not available:
            self.logger.warning(
                "Notification store unavailable, in-app delivery failed for %s",
                notification.recipient_id,
            )
            return self.create_failure_result("Notification store unavailable")

        self.logger.info(
            "In-app notification %s ready for %s",
            notification.id,
            notification.recipient_id,
        )
        return self.create_success_result(
            message_id=notification.id,
            metadata={"notification_id": notification.id},
        )
