# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification emitter backed by the event bus.

Publishing does not wait for subscribers: each event is handed to the
bus in a background task so slow deliveries (SMTP) never hold up a
pairing operation. Call ``drain()`` at shutdown to let pending
deliveries finish.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from src.infrastructure.events.bus import EventBus, get_event_bus

if TYPE_CHECKING:
    from src.domains.pairing.events import PairingEvent

logger = logging.getLogger(__name__)


class EventBusEmitter:
    """Publishes pairing events on an EventBus.

    Each event is published under its ``event_type`` with the payload
    produced by ``to_payload()``.
    """

    def __init__(self, bus: EventBus | None = None) -> None:
        self._bus = bus or get_event_bus()
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of deliveries still running."""
        return len(self._pending)

    async def publish(self, event: PairingEvent) -> None:
        """Schedule the event for delivery and return immediately."""
        logger.debug(
            "Emitting %s for record %s in workshop %s",
            event.event_type,
            event.recipient.record_id,
            event.workshop.id,
        )
        task = asyncio.create_task(
            self._deliver(event),
            name=f"emit:{event.event_type}:{event.event_id}",
        )
        self._pending.add(task)
        task.add_done_callback(self._on_done)

    async def _deliver(self, event: PairingEvent) -> None:
        await self._bus.publish(
            event.event_type,
            event.to_payload(),
            workshop_id=event.workshop.id,
        )

    def _on_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning("Delivery task %s was cancelled", task.get_name())
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "Delivery task %s failed: %s",
                task.get_name(),
                str(error),
                exc_info=error,
            )

    async def drain(self) -> None:
        """Wait for every scheduled delivery to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
