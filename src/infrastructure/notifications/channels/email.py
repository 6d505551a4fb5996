# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Email notification channel.

The channel builds a MIME message (plain text and HTML) from the
rendered notification and hands it to an EmailTransport. The default
transport, SmtpEmailTransport, sends through aiosmtplib.

Configuration (via environment variables, see SMTPSettings):
- SMTP_HOST: SMTP server hostname
- SMTP_PORT: SMTP server port (default: 587)
- SMTP_USERNAME: SMTP authentication username
- SMTP_PASSWORD: SMTP authentication password
- SMTP_USE_TLS: Use STARTTLS (default: true)
- SMTP_FROM_EMAIL: Sender email address
- SMTP_FROM_NAME: Sender display name
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from html import escape
from typing import Protocol

import aiosmtplib

from src.core.config.settings import SMTPSettings
from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
)
from src.infrastructure.notifications.types import ChannelType, Locale, Notification

# Greeting, label and footer around the rendered message, per locale
EMAIL_FRAME: dict[Locale, dict[str, str]] = {
    Locale.EN: {
        "greeting": "Dear {name},",
        "application": "Application",
        "footer": "This message was sent by the {school} admissions office.",
    },
    Locale.AR: {
        "greeting": "عزيزي/عزيزتي {name}،",
        "application": "رقم الطلب",
        "footer": "تم إرسال هذه الرسالة من مكتب القبول في {school}.",
    },
}


class EmailTransport(Protocol):
    """Anything that can put a MIME message on the wire."""

    async def deliver(self, message: MIMEMultipart) -> str | None:
        """Send the message and return the provider message ID, if any."""
        ...


class SmtpEmailTransport:
    """EmailTransport sending through an SMTP server with aiosmtplib."""

    def __init__(self, settings: SMTPSettings) -> None:
        """Initialize the transport.

        Args:
            settings: SMTP configuration. Must be fully configured.

        Raises:
            ValueError: If required SMTP settings are missing.
        """
        if not settings.is_configured:
            raise ValueError(
                "SMTP configuration incomplete: SMTP_HOST, SMTP_USERNAME, "
                "SMTP_PASSWORD and SMTP_FROM_EMAIL are required"
            )
        self._settings = settings

    async def deliver(self, message: MIMEMultipart) -> str | None:
        """Send a message via SMTP.

        Args:
            message: Message with To and Subject already set.

        Returns:
            The generated Message-ID.
        """
        settings = self._settings
        domain = settings.from_email.split("@")[-1]
        message["From"] = formataddr((settings.from_name, settings.from_email))
        message["Message-ID"] = make_msgid(domain=domain)

        await aiosmtplib.send(
            message,
            hostname=settings.host,
            port=settings.port,
            username=settings.username,
            password=settings.password.get_secret_value(),
            start_tls=settings.use_tls,
        )
        return message["Message-ID"]


class EmailChannel(BaseChannel):
    """Email notification channel.

    The channel generates both plain text and HTML versions of
    the email for maximum compatibility.
    """

    def __init__(
        self,
        transport: EmailTransport | None = None,
        school_name: str = "Moazzez School",
    ) -> None:
        """Initialize the email channel.

        Args:
            transport: Delivery transport. Without one every send fails.
            school_name: Organization name used in the email footer.
        """
        super().__init__()
        self._transport = transport
        self._school_name = school_name

    @property
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        return ChannelType.EMAIL

    async def send(self, notification: Notification) -> ChannelResult:
        """Send email notification.

        Args:
            notification: The notification to deliver.

        Returns:
            ChannelResult with delivery status.
        """
        if self._transport is None:
            return self.create_failure_result("Email channel not configured")

        if not notification.recipient_email:
            return self.create_failure_result("No recipient email address")

        try:
            message = self._build_email_message(notification)
            message_id = await self._transport.deliver(message)

            self.logger.info(
                "Email sent to %s: %s",
                notification.recipient_email,
                notification.email_subject,
            )
            return self.create_success_result(
                message_id=message_id,
                metadata={"recipient": notification.recipient_email},
            )

        except Exception as e:
            self.logger.error(
                "Failed to send email to %s: %s",
                notification.recipient_email,
                str(e),
                exc_info=True,
            )
            return self.create_failure_result(
                f"Email error: {str(e)}",
                metadata={"recipient": notification.recipient_email},
            )

    def _build_email_message(self, notification: Notification) -> MIMEMultipart:
        """Build MIME email message.

        Args:
            notification: Rendered notification.

        Returns:
            MIMEMultipart message without a From header.
        """
        message = MIMEMultipart("alternative")
        message["To"] = notification.recipient_email
        message["Subject"] = notification.email_subject

        message.attach(MIMEText(self._build_plain_text(notification), "plain", "utf-8"))
        message.attach(MIMEText(self._build_html(notification), "html", "utf-8"))

        return message

    def _frame(self, notification: Notification) -> dict[str, str]:
        frame = EMAIL_FRAME.get(notification.locale, EMAIL_FRAME[Locale.EN])
        return {
            "greeting": frame["greeting"].format(name=notification.recipient_name),
            "application": frame["application"],
            "footer": frame["footer"].format(school=self._school_name),
        }

    def _build_plain_text(self, notification: Notification) -> str:
        frame = self._frame(notification)
        lines = [
            notification.title,
            "=" * len(notification.title),
            "",
            frame["greeting"],
            "",
            notification.message,
            "",
        ]

        if notification.application_id:
            lines.append(f"{frame['application']}: {notification.application_id}")
            lines.append("")

        lines.extend([
            "---",
            frame["footer"],
        ])

        return "\n".join(lines)

    def _build_html(self, notification: Notification) -> str:
        direction = "rtl" if notification.locale == Locale.AR else "ltr"
        title = escape(notification.title)
        frame = self._frame(notification)
        greeting = escape(frame["greeting"])
        message = escape(notification.message).replace("\n", "<br>")

        application_info = ""
        if notification.application_id:
            application_info = f"""
            <p style="color: #6B7280; margin: 16px 0 0 0;">
                <strong>{escape(frame['application'])}:</strong> {escape(notification.application_id)}
            </p>
            """

        html = f"""
<!DOCTYPE html>
<html lang="{notification.locale.value}" dir="{direction}">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto,
             'Helvetica Neue', Arial, sans-serif; line-height: 1.6;
             color: #1F2937; margin: 0; padding: 0; background-color: #F3F4F6;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="background-color: white; border-radius: 8px;
                    padding: 32px; box-shadow: 0 1px 3px rgba(0,0,0,0.1);">
            <div style="border-bottom: 1px solid #E5E7EB; padding-bottom: 16px;
                        margin-bottom: 24px;">
                <h1 style="color: #4F46E5; font-size: 24px; margin: 0;">
                    {title}
                </h1>
            </div>
            <div style="font-size: 16px; color: #374151;">
                <p style="margin: 0 0 16px 0;">{greeting}</p>
                <p style="margin: 0 0 16px 0;">{message}</p>
                {application_info}
            </div>
            <div style="border-top: 1px solid #E5E7EB; padding-top: 16px;
                        margin-top: 24px; font-size: 12px; color: #9CA3AF;">
                <p style="margin: 0;">
                    {escape(frame['footer'])}
                </p>
            </div>
        </div>
    </div>
</body>
</html>
        """

        return html.strip()
