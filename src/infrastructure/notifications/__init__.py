# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification delivery for pairing and workshop events.

Key Components:
- PairingNotificationService: Renders bus events and sends them
- Channels: EmailChannel
- NotificationPayload: Data structure for notification content

Usage:
    from src.infrastructure.events import get_event_bus
    from src.infrastructure.notifications import PairingNotificationService

    service = PairingNotificationService(settings.notifications)
    service.register(get_event_bus())

Configuration (environment variables):
- NOTIFY_SMTP_HOST: SMTP server hostname
- NOTIFY_SMTP_PORT: SMTP server port (default: 587)
- NOTIFY_SMTP_USERNAME: SMTP authentication username
- NOTIFY_SMTP_PASSWORD: SMTP authentication password
- NOTIFY_FROM_EMAIL: Sender email address
- NOTIFY_FROM_NAME: Sender display name
- NOTIFY_SITE_URL: Link to the member profile page
"""

from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    EmailChannel,
    NotificationPayload,
)
from src.infrastructure.notifications.service import PairingNotificationService
from src.infrastructure.notifications.templates import RenderedMessage, render

__all__ = [
    # Service
    "PairingNotificationService",
    "RenderedMessage",
    "render",
    # Channel types
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "NotificationPayload",
    # Channels
    "EmailChannel",
]
