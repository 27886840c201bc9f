# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Human-readable descriptions of workshop changes."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol

from src.domains.pairing.events import DeltaKind, WorkshopDelta
from src.utils.datetime import format_day


class WorkshopLike(Protocol):
    name: str
    modality: str | None
    instructors: Iterable[str] | None
    date: Any
    time: Any
    location: str | None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return not any(str(item).strip() for item in value)
    return False


def _instructors(value: Iterable[str] | None) -> list[str]:
    return [name.strip() for name in value or () if name.strip()]


def describe_changes(
    before: WorkshopLike,
    after: WorkshopLike,
    date_format: str = "%d-%m-%Y",
) -> list[WorkshopDelta]:
    """Compare two versions of a workshop field by field.

    A field whose new value is missing or blank is treated as unchanged.

    Args:
        before: Workshop as it was.
        after: Workshop as it is now.
        date_format: strftime pattern used for dates.

    Returns:
        One delta per changed field, in display order.
    """
    deltas: list[WorkshopDelta] = []

    def add(field: str, label: str, value: str) -> None:
        deltas.append(
            WorkshopDelta(
                field=field,
                kind=DeltaKind.CHANGED,
                value=value,
                description=f"{label} changed: {value}",
            )
        )

    for field, label in (("name", "Name"), ("modality", "Modality"), ("location", "Location")):
        old, new = getattr(before, field), getattr(after, field)
        if not _is_blank(new) and new != old:
            add(field, label, new.strip())

    old_instructors = _instructors(before.instructors)
    new_instructors = _instructors(after.instructors)
    if new_instructors and new_instructors != old_instructors:
        add("instructors", "Instructors", ", ".join(new_instructors))

    if after.date is not None and after.date != before.date:
        add("date", "Date", format_day(after.date, date_format))
    if after.time is not None and after.time != before.time:
        add("time", "Time", after.time.strftime("%H:%M"))

    return deltas


def cancellation_delta(workshop: WorkshopLike, date_format: str = "%d-%m-%Y") -> WorkshopDelta:
    """Build the delta announcing that a workshop is cancelled."""
    summary = workshop.name
    if workshop.date is not None:
        summary += f" on {format_day(workshop.date, date_format)}"
    if not _is_blank(workshop.location):
        summary += f" at {workshop.location}"
    return WorkshopDelta(
        field="workshop",
        kind=DeltaKind.CANCELLED,
        value=workshop.name,
        description=f"Workshop cancelled: {summary}",
    )
