# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification channels for delivering notifications.

Usage:
    from src.infrastructure.notifications.channels import EmailChannel, NotificationPayload

    email = EmailChannel(settings.notifications)
    result = await email.send(
        NotificationPayload(
            notification_type="pairing.partner.assigned",
            title="Partner for the workshop: Salsa Basics",
            message="Ana Ruiz will be your partner...",
            recipient_email="member@example.com",
        )
    )
"""

from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    NotificationPayload,
)
from src.infrastructure.notifications.channels.email import EmailChannel

__all__ = [
    # Base types
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "NotificationPayload",
    # Channels
    "EmailChannel",
]
