# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification channels for delivering notifications.

This package provides channel implementations for sending
notifications through various delivery mechanisms:

- InAppChannel: Confirms the notification store can take the record
- EmailChannel: Sends email through an EmailTransport (SMTP by default)
- SmsChannel: Sends text messages through an SmsTransport (HTTP gateway by default)

Usage:
    from src.infrastructure.notifications.channels import (
        EmailChannel,
        SmtpEmailTransport,
    )

    email = EmailChannel(transport=SmtpEmailTransport(settings.smtp))
    result = await email.send(notification)
"""

from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
)
from src.infrastructure.notifications.channels.email import (
    EmailChannel,
    EmailTransport,
    SmtpEmailTransport,
)
from src.infrastructure.notifications.channels.in_app import InAppChannel
from src.infrastructure.notifications.channels.sms import (
    HttpSmsTransport,
    SmsChannel,
    SmsTransport,
)

__all__ = [
    # Base types
    "BaseChannel",
    "ChannelResult",
    # Channels
    "EmailChannel",
    "InAppChannel",
    "SmsChannel",
    # Transports
    "EmailTransport",
    "SmtpEmailTransport",
    "SmsTransport",
    "HttpSmsTransport",
]
