# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Sign-out with partner re-pairing.

When a confirmed user leaves a workshop their partner is returned to the
waitlist and immediately offered to the matching scan, all in the
transaction that deletes the departing record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.domains.pairing.errors import (
    PartnerRecordNotFoundError,
    RecordNotFoundError,
    UserNotFoundError,
)
from src.domains.pairing.events import (
    PairingEvent,
    Participant,
    PartnerReassigned,
    PartnerWithdrew,
    WorkshopSummary,
)
from src.domains.pairing.state import release

if TYPE_CHECKING:
    from src.domains.pairing.engine import PairingEngine
    from src.domains.pairing.ports import EnrollmentTransaction
    from src.infrastructure.database.models import EnrollmentRecord, Workshop

logger = logging.getLogger(__name__)


@dataclass
class SignOutOutcome:
    """What a sign-out did to the workshop."""

    workshop: Workshop
    removed: EnrollmentRecord
    orphan: EnrollmentRecord | None = None
    new_partner: EnrollmentRecord | None = None

    @property
    def partner_affected(self) -> bool:
        return self.orphan is not None

    @property
    def partner_rematched(self) -> bool:
        return self.new_partner is not None


class SignOutCascade:
    """Removes enrollments and re-pairs the partner left behind.

    Args:
        engine: Engine used for the re-matching scan.
    """

    def __init__(self, engine: PairingEngine) -> None:
        self._engine = engine

    async def sign_out(
        self,
        tx: EnrollmentTransaction,
        user_id: int,
        workshop_id: int,
        outbox: list[PairingEvent],
    ) -> SignOutOutcome:
        """Withdraw a user from a workshop.

        The departing record is deleted. If it was confirmed, the partner
        goes back to WAITING and the matching scan runs for it. The partner
        then receives PartnerReassigned when a new partner was found, or
        PartnerWithdrew when it is back on the waitlist.
        A departing user whose profile no longer exists is named by ids only.

        Raises:
            WorkshopNotFoundError: If the workshop does not exist.
            RecordNotFoundError: If the user is not enrolled.
            PartnerRecordNotFoundError: If the partner link is dangling.
        """
        workshop = await self._engine.load_workshop(tx, workshop_id)
        record = await tx.find_by_workshop_and_user(workshop_id, user_id)
        if record is None:
            raise RecordNotFoundError(user_id, workshop_id)

        orphan = None
        if record.partner_id is not None:
            orphan = await tx.find_by_id(record.partner_id)
            if orphan is None or orphan.partner_id != record.id:
                raise PartnerRecordNotFoundError(record.id, record.partner_id)

        # Describe the departing user before the record goes away
        try:
            departed = await self._engine.participant(record)
        except UserNotFoundError:
            logger.warning(
                "Profile of user %s is gone, signing out record %s without it",
                user_id,
                record.id,
            )
            departed = Participant.unknown(record.id, record.user_id)
        await tx.delete(record)
        logger.info(
            "User %s signed out of workshop %s (record %s)",
            user_id,
            workshop_id,
            record.id,
        )

        outcome = SignOutOutcome(workshop=workshop, removed=record, orphan=orphan)
        if orphan is None:
            return outcome

        release(orphan)
        await tx.save(orphan)
        outcome.new_partner = await self._engine.match(tx, orphan, workshop, outbox)

        recipient = await self._engine.participant(orphan)
        summary = WorkshopSummary.from_workshop(workshop)
        if outcome.new_partner is not None:
            outbox.append(
                PartnerReassigned(
                    recipient=recipient,
                    workshop=summary,
                    new_partner=await self._engine.participant(outcome.new_partner),
                    former_partner=departed,
                )
            )
            logger.info(
                "Record %s re-paired with record %s after partner left workshop %s",
                orphan.id,
                outcome.new_partner.id,
                workshop_id,
            )
        else:
            outbox.append(
                PartnerWithdrew(
                    recipient=recipient,
                    workshop=summary,
                    former_partner=departed,
                )
            )
            logger.info(
                "Record %s back on the waitlist of workshop %s",
                orphan.id,
                workshop_id,
            )
        return outcome
