# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment record model.

An enrollment record is one user's registration for one workshop together
with its pairing state. ``partner_id`` holds the id of the partner's
*enrollment record*, so a partnership is always scoped to one workshop.
It is a plain column rather than a relationship: partners are peers and
neither side owns the other.
"""

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin
from src.models.common import DanceRole, PairingStatus


class EnrollmentRecord(Base, TimestampMixin):
    """A user's registration for a workshop, carrying pairing state.

    Attributes:
        sequence: Per-workshop arrival order. The waitlist is scanned in
            ascending sequence, so the earliest waiting record wins.
        role: Dance role copied from the user's profile at creation.
        status: WAITING or CONFIRMED; CONFIRMED iff partner_id is set.
        partner_id: Id of the partner's enrollment record.
    """

    __tablename__ = "enrollment_records"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    workshop_id: Mapped[int] = mapped_column(
        ForeignKey("workshops.id", ondelete="CASCADE"),
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    sequence: Mapped[int] = mapped_column(Integer)
    role: Mapped[DanceRole] = mapped_column(
        SAEnum(DanceRole, name="dance_role", values_callable=lambda e: [m.value for m in e]),
    )
    status: Mapped[PairingStatus] = mapped_column(
        SAEnum(PairingStatus, name="pairing_status", values_callable=lambda e: [m.value for m in e]),
        default=PairingStatus.WAITING,
    )
    partner_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("workshop_id", "user_id", name="uq_enrollment_records_workshop_user"),
        Index("ix_enrollment_records_workshop_sequence", "workshop_id", "sequence"),
    )

    @property
    def is_confirmed(self) -> bool:
        """Check whether the record currently has a partner."""
        return self.status == PairingStatus.CONFIRMED

    @property
    def state_label(self) -> str:
        """Render the state as STATUS(ROLE), e.g. ``WAITING(LEADER)``."""
        return f"{self.status.name}({self.role.name})"

    def __repr__(self) -> str:
        return (
            f"<EnrollmentRecord id={self.id} workshop={self.workshop_id} "
            f"user={self.user_id} {self.state_label} partner={self.partner_id}>"
        )
