# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Email notification channel using async SMTP.

Sends plain text and HTML versions of each notification with
aiosmtplib. Configuration comes from NotificationSettings (``NOTIFY_*``
environment variables). When the SMTP settings are incomplete every send
is reported as skipped.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from html import escape

import aiosmtplib

from src.core.config.settings import NotificationSettings
from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    NotificationPayload,
)


class EmailChannel(BaseChannel):
    """Email notification channel using async SMTP.

    Args:
        settings: Notification settings holding the SMTP configuration.
    """

    def __init__(self, settings: NotificationSettings) -> None:
        super().__init__()
        self._settings = settings
        if not settings.email_enabled:
            self.logger.warning(
                "Email notifications disabled: NOTIFY_SMTP_HOST, NOTIFY_SMTP_USERNAME, "
                "NOTIFY_SMTP_PASSWORD, or NOTIFY_FROM_EMAIL not set"
            )

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.EMAIL

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        """Send email notification via SMTP.

        Args:
            payload: The notification payload.

        Returns:
            ChannelResult with delivery status.
        """
        if not self._settings.email_enabled:
            return self.create_skipped_result("SMTP configuration incomplete")

        if not payload.recipient_email:
            return self.create_skipped_result("No recipient email address")

        message = self.build_message(payload)
        password = self._settings.smtp_password
        try:
            await aiosmtplib.send(
                message,
                hostname=self._settings.smtp_host,
                port=self._settings.smtp_port,
                username=self._settings.smtp_username,
                password=password.get_secret_value() if password else None,
                start_tls=self._settings.smtp_use_tls,
                timeout=self._settings.smtp_timeout_seconds,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            self.logger.error(
                "Failed to send email to %s: %s",
                payload.recipient_email,
                str(e),
                exc_info=True,
            )
            return self.create_failure_result(
                f"SMTP error: {str(e)}",
                metadata={"recipient": payload.recipient_email},
            )

        self.logger.info("Email sent to %s: %s", payload.recipient_email, payload.title)
        return self.create_success_result(
            message_id=message["Message-ID"],
            metadata={"recipient": payload.recipient_email},
        )

    def build_message(self, payload: NotificationPayload) -> MIMEMultipart:
        """Build the MIME message with plain text and HTML parts."""
        message = MIMEMultipart("alternative")
        message["From"] = formataddr((self._settings.from_name, self._settings.from_email))
        message["To"] = payload.recipient_email
        message["Subject"] = payload.title
        message["Message-ID"] = make_msgid()

        message.attach(MIMEText(self._build_plain_text(payload), "plain", "utf-8"))
        message.attach(MIMEText(self._build_html(payload), "html", "utf-8"))
        return message

    def _build_plain_text(self, payload: NotificationPayload) -> str:
        lines = [payload.message, ""]
        if payload.action_url:
            action_text = payload.action_label or "Manage your attendance"
            lines.extend([f"{action_text}: {payload.action_url}", ""])
        lines.extend(["Thank you,", self._settings.from_name])
        return "\n".join(lines)

    def _build_html(self, payload: NotificationPayload) -> str:
        body = payload.html_message or "<p>{}</p>".format(
            escape(payload.message).replace("\n", "<br>")
        )

        action_link = ""
        if payload.action_url:
            label = escape(payload.action_label or "Manage your attendance")
            action_link = f'<p><a href="{escape(payload.action_url)}">{label}</a></p>'

        html = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #1F2937;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
        {body}
        {action_link}
        <p>Thank you,<br>{escape(self._settings.from_name)}</p>
    </div>
</body>
</html>
        """
        return html.strip()
