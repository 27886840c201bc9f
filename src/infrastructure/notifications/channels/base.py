# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Base classes for notification channels.

This module defines the abstract base class and shared types for all
notification channels. Each channel handles delivery through a specific
medium and reports the outcome as a ChannelResult instead of raising.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.utils.datetime import utc_now


class ChannelType(str, Enum):
    """Available notification channel types."""

    EMAIL = "email"


class DeliveryStatus(str, Enum):
    """Delivery status for a channel."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class NotificationPayload:
    """Payload for sending a notification.

    Attributes:
        notification_type: Event type the notification was rendered from.
        title: Notification title, used as the email subject.
        message: Plain text body.
        recipient_email: Email address of the recipient.
        recipient_name: First name used in the greeting.
        html_message: Optional HTML body.
        action_url: URL where the member manages their attendance.
        action_label: Label for the action link.
        data: Additional data for the notification.
    """

    notification_type: str
    title: str
    message: str
    recipient_email: str
    recipient_name: str = ""
    html_message: str | None = None
    action_url: str | None = None
    action_label: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class ChannelResult:
    """Result of a channel send operation.

    Attributes:
        channel: Which channel was used.
        status: Delivery status.
        message_id: External message ID (if available).
        error_message: Error message if failed or skipped.
        sent_at: When the send was attempted.
        metadata: Additional result metadata.
    """

    channel: ChannelType
    status: DeliveryStatus
    message_id: str | None = None
    error_message: str | None = None
    sent_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "channel": self.channel.value,
            "status": self.status.value,
            "message_id": self.message_id,
            "error_message": self.error_message,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "metadata": self.metadata,
        }


class BaseChannel(ABC):
    """Abstract base class for notification channels.

    Channels must implement the send method and handle their own
    error recovery.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        ...

    @abstractmethod
    async def send(self, payload: NotificationPayload) -> ChannelResult:
        """Send a notification through this channel.

        Args:
            payload: The notification payload to send.

        Returns:
            ChannelResult with delivery status.
        """
        ...

    def create_success_result(
        self,
        message_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ChannelResult:
        """Create a successful channel result."""
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.SENT,
            message_id=message_id,
            sent_at=utc_now(),
            metadata=metadata or {},
        )

    def create_failure_result(
        self,
        error_message: str,
        metadata: dict[str, Any] | None = None,
    ) -> ChannelResult:
        """Create a failed channel result."""
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.FAILED,
            error_message=error_message,
            sent_at=utc_now(),
            metadata=metadata or {},
        )

    def create_skipped_result(self, reason: str) -> ChannelResult:
        """Create a skipped channel result."""
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.SKIPPED,
            error_message=reason,
            sent_at=utc_now(),
        )
