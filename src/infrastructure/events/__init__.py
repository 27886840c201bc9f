# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event infrastructure module.

Components:
- EventBus: In-memory pub/sub with pattern matching
- EventTypes: Centralized event type constants
- EventBusEmitter: Hands committed pairing events to the bus

Architecture:
    PairingService → EventBusEmitter → EventBus → PairingNotificationService → channels

Quick Start:
    from src.infrastructure.events import EventBusEmitter, EventPatterns, get_event_bus

    event_bus = get_event_bus()
    event_bus.subscribe(EventPatterns.ALL_PAIRING, my_handler)
    emitter = EventBusEmitter(event_bus)
"""

from src.infrastructure.events.bus import (
    EventBus,
    EventData,
    EventHandler,
    get_event_bus,
    reset_event_bus,
)
from src.infrastructure.events.emitter import EventBusEmitter
from src.infrastructure.events.types import (
    EventCategory,
    EventPatterns,
    EventRegistry,
    EventTypes,
)

__all__ = [
    # Event Bus
    "EventBus",
    "EventData",
    "EventHandler",
    "get_event_bus",
    "reset_event_bus",
    "EventBusEmitter",
    # Event Types
    "EventTypes",
    "EventPatterns",
    "EventCategory",
    "EventRegistry",
]
