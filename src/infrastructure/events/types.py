# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Centralized event type definitions for the workshop pairing service.

Using constants instead of string literals keeps event names in one
place. Subscribers usually listen on a domain pattern from
``EventPatterns`` so new event types are picked up automatically.

Adding a new event:
1. Add constant to appropriate class here
2. Register its category in EventRegistry
3. Add a template for it if members should be notified
"""


class EventTypes:
    """All event types organized by domain."""

    class Pairing:
        """Partner pairing events, one per notified enrollment record."""

        PARTNER_ASSIGNED = "pairing.partner.assigned"
        PARTNER_WITHDREW = "pairing.partner.withdrew"
        PARTNER_REASSIGNED = "pairing.partner.reassigned"

    class Workshop:
        """Workshop lifecycle events."""

        CHANGED = "workshop.changed"


class EventPatterns:
    """Wildcard patterns for subscribing to multiple events."""

    ALL_PAIRING = "pairing.*"
    ALL_WORKSHOP = "workshop.*"

    # Global wildcard
    ALL = "*"


class EventCategory:
    """Event categories used when logging deliveries."""

    PAIRING = "pairing"
    SCHEDULE = "schedule"


class EventRegistry:
    """Registry for event metadata and categorization."""

    _category_map: dict[str, str] = {
        EventTypes.Pairing.PARTNER_ASSIGNED: EventCategory.PAIRING,
        EventTypes.Pairing.PARTNER_WITHDREW: EventCategory.PAIRING,
        EventTypes.Pairing.PARTNER_REASSIGNED: EventCategory.PAIRING,
        EventTypes.Workshop.CHANGED: EventCategory.SCHEDULE,
    }

    @classmethod
    def get_category(cls, event_type: str) -> str | None:
        """Get the category for an event type.

        Args:
            event_type: Event type string.

        Returns:
            Category string or None if not categorized.
        """
        return cls._category_map.get(event_type)

    @classmethod
    def is_known(cls, event_type: str) -> bool:
        """Check if the event type is registered."""
        return event_type in cls._category_map
