# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for workshop change descriptions."""

import datetime as dt
from types import SimpleNamespace

from src.domains.pairing.events import DeltaKind
from src.domains.workshop.changes import cancellation_delta, describe_changes


def make_workshop(**overrides):
    values = {
        "name": "Salsa Basics",
        "modality": "Salsa",
        "instructors": ["Sara"],
        "date": dt.date(2030, 5, 17),
        "time": dt.time(20, 30),
        "location": "Main Hall",
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestDescribeChanges:
    """Tests for describe_changes."""

    def test_no_changes(self):
        """Test identical workshops produce no deltas."""
        assert describe_changes(make_workshop(), make_workshop()) == []

    def test_every_field(self):
        """Test each changed field is described in display order."""
        after = make_workshop(
            name="Salsa Intermediate",
            modality="Cuban Salsa",
            location="Studio B",
            instructors=["Sara", " Tomas "],
            date=dt.date(2030, 6, 1),
            time=dt.time(19, 0),
        )

        deltas = describe_changes(make_workshop(), after)

        assert [d.description for d in deltas] == [
            "Name changed: Salsa Intermediate",
            "Modality changed: Cuban Salsa",
            "Location changed: Studio B",
            "Instructors changed: Sara, Tomas",
            "Date changed: 01-06-2030",
            "Time changed: 19:00",
        ]
        assert all(d.kind == DeltaKind.CHANGED for d in deltas)
        assert [d.field for d in deltas] == [
            "name", "modality", "location", "instructors", "date", "time",
        ]

    def test_blank_values_are_ignored(self):
        """Test cleared fields are not announced."""
        after = make_workshop(name="  ", modality=None, location="", instructors=[" "], date=None)

        assert describe_changes(make_workshop(), after) == []

    def test_custom_date_format(self):
        """Test dates follow the configured pattern."""
        after = make_workshop(date=dt.date(2030, 6, 1))

        (delta,) = describe_changes(make_workshop(), after, date_format="%Y/%m/%d")

        assert delta.value == "2030/06/01"


class TestCancellationDelta:
    """Tests for cancellation_delta."""

    def test_full_description(self):
        """Test the cancellation names the workshop, date and place."""
        delta = cancellation_delta(make_workshop())

        assert delta.kind == DeltaKind.CANCELLED
        assert delta.field == "workshop"
        assert delta.description == (
            "Workshop cancelled: Salsa Basics on 17-05-2030 at Main Hall"
        )

    def test_without_date_or_location(self):
        """Test missing details are left out."""
        delta = cancellation_delta(make_workshop(date=None, location=None))

        assert delta.description == "Workshop cancelled: Salsa Basics"
