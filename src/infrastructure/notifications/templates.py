# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Message templates for pairing and workshop notifications.

Each renderer turns an event payload, as published on the event bus,
into a subject and a plain text body addressed to the recipient.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable

from src.infrastructure.events.types import EventTypes
from src.utils.datetime import format_day


@dataclass(frozen=True)
class RenderedMessage:
    """Subject and body of a notification."""

    title: str
    message: str


Renderer = Callable[[dict[str, Any], str], RenderedMessage]

_CANCEL_REQUEST = (
    "If you cannot attend, please cancel your registration so that "
    "someone else can take your place."
)


def _when_where(workshop: dict[str, Any], date_format: str) -> str:
    parts = []
    if workshop.get("date"):
        parts.append(f"on {format_day(date.fromisoformat(workshop['date']), date_format)}")
    if workshop.get("location"):
        parts.append(f"at {workshop['location']}")
    return " ".join(parts)


def _former_partner(payload: dict[str, Any]) -> str:
    return payload["former_partner"].get("full_name") or "Your partner"


def _event_line(workshop: dict[str, Any], date_format: str) -> str:
    when_where = _when_where(workshop, date_format)
    line = f"the workshop {workshop['name']}"
    return f"{line} {when_where}" if when_where else line


def render_partner_assigned(payload: dict[str, Any], date_format: str) -> RenderedMessage:
    workshop = payload["workshop"]
    return RenderedMessage(
        title=f"Partner for the workshop: {workshop['name']}",
        message=(
            f"Hello {payload['recipient']['name']},\n\n"
            f"{payload['partner']['full_name']} will be your partner for "
            f"{_event_line(workshop, date_format)}.\n\n"
            f"{_CANCEL_REQUEST}"
        ),
    )


def render_partner_withdrew(payload: dict[str, Any], date_format: str) -> RenderedMessage:
    workshop = payload["workshop"]
    return RenderedMessage(
        title=f"Your partner cancelled their attendance: {workshop['name']}",
        message=(
            f"Hello {payload['recipient']['name']},\n\n"
            f"{_former_partner(payload)} has cancelled their attendance at "
            f"{_event_line(workshop, date_format)}.\n\n"
            "You are back on the waiting list until a new partner is found. "
            "We will let you know as soon as one is assigned.\n"
            "You can cancel your registration or add a partner from your profile."
        ),
    )


def render_partner_reassigned(payload: dict[str, Any], date_format: str) -> RenderedMessage:
    workshop = payload["workshop"]
    return RenderedMessage(
        title=f"Your partner cancelled and you have a new partner: {workshop['name']}",
        message=(
            f"Hello {payload['recipient']['name']},\n\n"
            f"{_former_partner(payload)} has cancelled their attendance at "
            f"{_event_line(workshop, date_format)}.\n\n"
            f"Your new partner is {payload['new_partner']['full_name']}.\n\n"
            f"{_CANCEL_REQUEST}"
        ),
    )


def _workshop_details(workshop: dict[str, Any], date_format: str) -> list[str]:
    headline = workshop["name"]
    if workshop.get("instructors"):
        headline += f" with {', '.join(workshop['instructors'])}"
    day = format_day(date.fromisoformat(workshop["date"]), date_format) if workshop.get("date") else ""
    return [
        "Updated workshop details:",
        headline,
        f"Modality: {workshop.get('modality') or ''}",
        f"Date: {day}",
        f"Time: {workshop.get('time') or ''}",
        f"Location: {workshop.get('location') or ''}",
    ]


def render_workshop_changed(payload: dict[str, Any], date_format: str) -> RenderedMessage:
    workshop = payload["workshop"]
    lines = [
        f"Hello {payload['recipient']['name']},",
        "",
        f"The workshop {workshop['name']} has changed:",
    ]
    lines.extend(f"- {delta['description']}" for delta in payload["deltas"])
    lines.append("")

    if payload.get("cancelled"):
        title = f"Workshop cancelled: {workshop['name']}"
        lines.append("We apologise for the inconvenience.")
    else:
        title = f"Changes to the workshop: {workshop['name']}"
        lines.extend(_workshop_details(workshop, date_format))

    return RenderedMessage(title=title, message="\n".join(lines))


RENDERERS: dict[str, Renderer] = {
    EventTypes.Pairing.PARTNER_ASSIGNED: render_partner_assigned,
    EventTypes.Pairing.PARTNER_WITHDREW: render_partner_withdrew,
    EventTypes.Pairing.PARTNER_REASSIGNED: render_partner_reassigned,
    EventTypes.Workshop.CHANGED: render_workshop_changed,
}


def render(event_type: str, payload: dict[str, Any], date_format: str = "%d-%m-%Y") -> RenderedMessage | None:
    """Render the notification for an event.

    Returns:
        The rendered message, or None if the event type has no template.
    """
    renderer = RENDERERS.get(event_type)
    if renderer is None:
        return None
    return renderer(payload, date_format)
