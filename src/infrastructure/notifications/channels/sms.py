# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SMS notification channel.

The channel sends the notification's rendered SMS text through an
SmsTransport. The default transport, HttpSmsTransport, posts to a JSON
HTTP gateway with httpx.

Configuration (via environment variables, see SMSSettings):
- SMS_GATEWAY_URL: Gateway endpoint accepting outbound messages
- SMS_API_KEY: Bearer token for the gateway
- SMS_SENDER_ID: Sender name or number
- SMS_TIMEOUT: Request timeout in seconds
"""

from typing import Any, Protocol

import httpx

from src.core.config.settings import SMSSettings
from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
)
from src.infrastructure.notifications.types import ChannelType, Notification


def _message_id(response: httpx.Response) -> str | None:
    """Read the provider message ID from an accepted gateway response.

    A 2xx answer means the message was accepted even when the body is
    not a JSON object. Such answers carry no ID.
    """
    if not response.content:
        return None
    try:
        body: Any = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    message_id = body.get("id") or body.get("message_id")
    return str(message_id) if message_id is not None else None


class SmsTransport(Protocol):
    """Anything that can deliver a text message to a phone number."""

    async def send_sms(self, to: str, text: str) -> str | None:
        """Send the message and return the provider message ID, if any."""
        ...


class HttpSmsTransport:
    """SmsTransport posting messages to an HTTP gateway.

    Request body: {"to": ..., "from": ..., "message": ...}. The gateway's
    JSON response may carry the provider message ID under "id" or
    "message_id".
    """

    def __init__(
        self,
        settings: SMSSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            settings: SMS gateway configuration. Must be fully configured.
            client: HTTP client to reuse. One is created when omitted.

        Raises:
            ValueError: If the gateway URL or API key is missing.
        """
        if not settings.is_configured:
            raise ValueError("SMS configuration incomplete: SMS_GATEWAY_URL and SMS_API_KEY are required")
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.timeout)

    async def send_sms(self, to: str, text: str) -> str | None:
        """Post one message to the gateway.

        Args:
            to: Destination phone number.
            text: Message text.

        Returns:
            Provider message ID, if the gateway returns one.

        Raises:
            httpx.HTTPError: If the request fails or the gateway rejects it.
        """
        response = await self._client.post(
            self._settings.gateway_url,
            json={
                "to": to,
                "from": self._settings.sender_id,
                "message": text,
            },
            headers={
                "Authorization": f"Bearer {self._settings.api_key.get_secret_value()}",
            },
        )
        response.raise_for_status()

        return _message_id(response)

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()


class SmsChannel(BaseChannel):
    """SMS notification channel."""

    def __init__(self, transport: SmsTransport | None = None) -> None:
        """Initialize the SMS channel.

        Args:
            transport: Delivery transport. Without one every send fails.
        """
        super().__init__()
        self._transport = transport

    @property
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        return ChannelType.SMS

    async def aclose(self) -> None:
        """Close the transport if it holds a connection pool."""
        closer = getattr(self._transport, "aclose", None)
        if closer is not None:
            await closer()

    async def send(self, notification: Notification) -> ChannelResult:
        """Send SMS notification.

        Args:
            notification: The notification to deliver.

        Returns:
            ChannelResult with delivery status.
        """
        if self._transport is None:
            return self.create_failure_result("SMS channel not configured")

        if not notification.recipient_phone:
            return self.create_failure_result("No recipient phone number")

        try:
            message_id = await self._transport.send_sms(
                notification.recipient_phone,
                notification.sms_message,
            )

            self.logger.info(
                "SMS sent to %s for notification %s",
                notification.recipient_phone,
                notification.id,
            )
            return self.create_success_result(
                message_id=message_id,
                metadata={"recipient": notification.recipient_phone},
            )

        except Exception as e:
            self.logger.error(
                "Failed to send SMS to %s: %s",
                notification.recipient_phone,
                str(e),
                exc_info=True,
            )
            return self.create_failure_result(
                f"SMS error: {str(e)}",
                metadata={"recipient": notification.recipient_phone},
            )
