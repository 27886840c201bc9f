# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pairing domain events.

Events are value objects. They are collected while a workshop
transaction runs and are only handed to the notification emitter after
the transaction commits. Each event targets one recipient enrollment
record and carries everything a notifier needs to describe it, so no
consumer has to read the store again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import datetime as dt
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar
from uuid import uuid4

from src.infrastructure.events.types import EventTypes
from src.utils.datetime import format_iso, utc_now

if TYPE_CHECKING:
    from src.domains.pairing.ports import UserProfile
    from src.infrastructure.database.models import Workshop


@dataclass(frozen=True)
class Participant:
    """An enrolled user as named in an event."""

    record_id: int
    user_id: int
    name: str
    surname: str
    email: str

    @classmethod
    def from_profile(cls, record_id: int, profile: UserProfile) -> Participant:
        return cls(
            record_id=record_id,
            user_id=profile.id,
            name=profile.name,
            surname=profile.surname,
            email=profile.email,
        )

    @classmethod
    def unknown(cls, record_id: int, user_id: int) -> Participant:
        """A participant whose profile is no longer available."""
        return cls(record_id=record_id, user_id=user_id, name="", surname="", email="")

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_id": self.record_id,
            "user_id": self.user_id,
            "name": self.name,
            "surname": self.surname,
            "email": self.email,
            "full_name": self.full_name,
        }


@dataclass(frozen=True)
class WorkshopSummary:
    """Snapshot of the workshop fields shown in notifications."""

    id: int
    name: str
    modality: str | None = None
    instructors: tuple[str, ...] = ()
    date: dt.date | None = None
    time: dt.time | None = None
    location: str | None = None

    @classmethod
    def from_workshop(cls, workshop: Workshop) -> WorkshopSummary:
        return cls(
            id=workshop.id,
            name=workshop.name,
            modality=workshop.modality,
            instructors=tuple(workshop.instructors or ()),
            date=workshop.date,
            time=workshop.time,
            location=workshop.location,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "modality": self.modality,
            "instructors": list(self.instructors),
            "date": self.date.isoformat() if self.date else None,
            "time": self.time.strftime("%H:%M") if self.time else None,
            "location": self.location,
        }


class DeltaKind(str, Enum):
    """Kind of workshop change."""

    CHANGED = "changed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class WorkshopDelta:
    """One human-readable change to a workshop.

    Attributes:
        field: Name of the changed field, or ``workshop`` for a cancellation.
        kind: Whether the field changed or the workshop was cancelled.
        value: The new value as displayed to members.
        description: Sentence describing the change.
    """

    field: str
    kind: DeltaKind
    value: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "kind": self.kind.value,
            "value": self.value,
            "description": self.description,
        }


@dataclass(frozen=True)
class PairingEvent:
    """Base class for events addressed to one enrollment record."""

    event_type: ClassVar[str] = ""

    recipient: Participant
    workshop: WorkshopSummary
    event_id: str = field(default_factory=lambda: str(uuid4()), kw_only=True)
    occurred_at: dt.datetime = field(default_factory=utc_now, kw_only=True)

    def _details(self) -> dict[str, Any]:
        return {}

    def to_payload(self) -> dict[str, Any]:
        """Serialize the event for the event bus."""
        return {
            "event_id": self.event_id,
            "occurred_at": format_iso(self.occurred_at),
            "recipient": self.recipient.to_dict(),
            "workshop": self.workshop.to_dict(),
            **self._details(),
        }


@dataclass(frozen=True)
class NewPartnerAssigned(PairingEvent):
    """The recipient has been given a partner."""

    event_type: ClassVar[str] = EventTypes.Pairing.PARTNER_ASSIGNED

    partner: Participant

    def _details(self) -> dict[str, Any]:
        return {"partner": self.partner.to_dict()}


@dataclass(frozen=True)
class PartnerWithdrew(PairingEvent):
    """The recipient's partner signed out and no replacement was found."""

    event_type: ClassVar[str] = EventTypes.Pairing.PARTNER_WITHDREW

    former_partner: Participant

    def _details(self) -> dict[str, Any]:
        return {"former_partner": self.former_partner.to_dict()}


@dataclass(frozen=True)
class PartnerReassigned(PairingEvent):
    """The recipient's partner signed out and a new partner was found."""

    event_type: ClassVar[str] = EventTypes.Pairing.PARTNER_REASSIGNED

    new_partner: Participant
    former_partner: Participant

    def _details(self) -> dict[str, Any]:
        return {
            "new_partner": self.new_partner.to_dict(),
            "former_partner": self.former_partner.to_dict(),
        }


@dataclass(frozen=True)
class WorkshopChanged(PairingEvent):
    """A workshop the recipient is enrolled in was modified or cancelled."""

    event_type: ClassVar[str] = EventTypes.Workshop.CHANGED

    deltas: tuple[WorkshopDelta, ...] = ()

    @property
    def is_cancellation(self) -> bool:
        return any(delta.kind == DeltaKind.CANCELLED for delta in self.deltas)

    def _details(self) -> dict[str, Any]:
        return {
            "deltas": [delta.to_dict() for delta in self.deltas],
            "cancelled": self.is_cancellation,
        }
