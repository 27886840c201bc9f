# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Response models for the pairing service."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import DanceRole, PairingStatus


class EnrollmentRecordView(BaseModel):
    """Read-only view of an enrollment record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    workshop_id: int
    user_id: int
    role: DanceRole
    status: PairingStatus
    partner_id: int | None = None
    sequence: int
    created_at: datetime | None = None

    @property
    def is_confirmed(self) -> bool:
        """Check whether the record has a partner."""
        return self.status == PairingStatus.CONFIRMED


class PairingResult(BaseModel):
    """Outcome of a direct pair or add-partner request.

    Both records are CONFIRMED and reference each other.
    """

    record: EnrollmentRecordView
    partner_record: EnrollmentRecordView


class SignOutConfirmation(BaseModel):
    """Outcome of a sign-out.

    Attributes:
        workshop_id: Workshop the user left.
        workshop_name: Name of the workshop, for confirmation messages.
        partner_affected: True if the departing record had a partner.
        partner_rematched: True if that partner was paired again.
        orphan_record_id: Record id of the former partner, if any.
        new_partner_record_id: Record the former partner was matched with.
    """

    workshop_id: int
    workshop_name: str
    partner_affected: bool = False
    partner_rematched: bool = False
    orphan_record_id: int | None = None
    new_partner_record_id: int | None = None


class RosterEntry(BaseModel):
    """One participant line of a workshop roster."""

    record_id: int
    user_id: int
    name: str
    surname: str
    email: str
    phone: str | None = None
    role: DanceRole
    status: PairingStatus
    partner_name: str | None = Field(
        default=None,
        description="Full name of the partner, or None while waiting.",
    )
