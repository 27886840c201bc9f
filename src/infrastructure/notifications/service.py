# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification service for pairing and workshop events.

This service handles the complete notification flow:
1. Receiving committed events from the event bus
2. Rendering the message for the event type
3. Sending through every configured channel

Delivery failures are logged and reported in the results, never raised,
so a broken mail server cannot affect enrollment.
"""

import logging

from src.core.config.settings import NotificationSettings
from src.infrastructure.events.bus import EventBus, EventData
from src.infrastructure.events.types import EventPatterns, EventRegistry
from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    DeliveryStatus,
    EmailChannel,
    NotificationPayload,
)
from src.infrastructure.notifications.templates import render

logger = logging.getLogger(__name__)


class PairingNotificationService:
    """Turns pairing and workshop events into member notifications.

    Args:
        settings: Notification settings.
        channels: Delivery channels. Defaults to an EmailChannel built
            from the settings.
    """

    def __init__(
        self,
        settings: NotificationSettings,
        channels: list[BaseChannel] | None = None,
    ) -> None:
        self._settings = settings
        self.channels = channels if channels is not None else [EmailChannel(settings)]
        logger.info(
            "PairingNotificationService initialized with %d channels",
            len(self.channels),
        )

    def register(self, bus: EventBus) -> None:
        """Subscribe to pairing and workshop events on the bus."""
        bus.subscribe(EventPatterns.ALL_PAIRING, self.handle_event)
        bus.subscribe(EventPatterns.ALL_WORKSHOP, self.handle_event)

    def unregister(self, bus: EventBus) -> None:
        bus.unsubscribe(EventPatterns.ALL_PAIRING, self.handle_event)
        bus.unsubscribe(EventPatterns.ALL_WORKSHOP, self.handle_event)

    def build_payload(self, event: EventData) -> NotificationPayload | None:
        """Render an event into a notification payload.

        Returns:
            The payload, or None if the event type has no template.
        """
        rendered = render(event.event_type, event.payload, self._settings.date_format)
        if rendered is None:
            return None

        recipient = event.payload["recipient"]
        return NotificationPayload(
            notification_type=event.event_type,
            title=rendered.title,
            message=rendered.message,
            recipient_email=recipient["email"],
            recipient_name=recipient["name"],
            action_url=self._settings.site_url,
            action_label="Manage your attendance from your profile",
            data={
                "event_id": event.event_id,
                "workshop_id": event.workshop_id,
                "record_id": recipient["record_id"],
            },
        )

    async def handle_event(self, event: EventData) -> list[ChannelResult]:
        """Notify the event's recipient through every channel.

        Args:
            event: Event received from the bus.

        Returns:
            One result per channel; empty if nothing was sent.
        """
        payload = self.build_payload(event)
        if payload is None:
            logger.debug("No notification template for event %s", event.event_type)
            return []

        results: list[ChannelResult] = []
        for channel in self.channels:
            try:
                result = await channel.send(payload)
            except Exception as e:
                logger.error(
                    "Channel %s failed for event %s: %s",
                    channel.channel_type.value,
                    event.event_type,
                    str(e),
                    exc_info=True,
                )
                result = channel.create_failure_result(str(e))
            results.append(result)

            if result.status == DeliveryStatus.FAILED:
                logger.warning(
                    "Notification %s to %s failed on %s: %s",
                    event.event_type,
                    payload.recipient_email,
                    result.channel.value,
                    result.error_message,
                )

        logger.info(
            "Handled %s event %s for record %s (%s)",
            EventRegistry.get_category(event.event_type),
            event.event_type,
            payload.data["record_id"],
            ", ".join(f"{r.channel.value}={r.status.value}" for r in results),
        )
        return results
