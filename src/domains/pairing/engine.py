# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Partner pairing engine.

The engine runs inside a workshop transaction opened by the caller and
never commits on its own. Events it produces are appended to the
caller's outbox so they can be published after commit.

Matching is first come, first served: a newly waiting record is paired
with the earliest waiting record of the complementary role, earliest
meaning lowest ``sequence``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from src.domains.pairing.errors import (
    AlreadyEnrolledError,
    AlreadyPairedError,
    RecordNotFoundError,
    RoleMismatchError,
    SelfPairingError,
    WorkshopNotFoundError,
)
from src.domains.pairing.events import (
    NewPartnerAssigned,
    PairingEvent,
    Participant,
    WorkshopSummary,
)
from src.domains.pairing.state import can_pair, confirm_pair, is_waiting

if TYPE_CHECKING:
    from src.domains.pairing.ports import (
        EnrollmentTransaction,
        UserDirectory,
        UserProfile,
    )
    from src.infrastructure.database.models import EnrollmentRecord, Workshop

logger = logging.getLogger(__name__)


class PairingEngine:
    """Enrollment and partner assignment within one workshop.

    Args:
        directory: User directory used to resolve profiles.
    """

    def __init__(self, directory: UserDirectory) -> None:
        self._directory = directory

    async def load_workshop(self, tx: EnrollmentTransaction, workshop_id: int) -> Workshop:
        """Fetch a workshop or raise WorkshopNotFoundError."""
        workshop = await tx.get_workshop(workshop_id)
        if workshop is None:
            raise WorkshopNotFoundError(workshop_id)
        return workshop

    async def participant(self, record: EnrollmentRecord) -> Participant:
        """Describe a record's user for an event."""
        profile = await self._directory.find_by_id(record.user_id)
        return Participant.from_profile(record.id, profile)

    async def enroll(
        self,
        tx: EnrollmentTransaction,
        user_id: int,
        workshop_id: int,
        outbox: list[PairingEvent],
    ) -> EnrollmentRecord:
        """Enroll a user and try to pair them immediately.

        Args:
            tx: Open workshop transaction.
            user_id: User to enroll.
            workshop_id: Target workshop.
            outbox: Receives a NewPartnerAssigned event on a match.

        Returns:
            The new record, CONFIRMED if a partner was found, else WAITING.

        Raises:
            UserNotFoundError: If the user does not exist.
            WorkshopNotFoundError: If the workshop does not exist.
            AlreadyEnrolledError: If the user already has a record.
        """
        profile = await self._directory.find_by_id(user_id)
        workshop = await self.load_workshop(tx, workshop_id)

        if await tx.find_by_workshop_and_user(workshop_id, user_id) is not None:
            raise AlreadyEnrolledError(user_id, workshop_id, email=profile.email)

        record = await tx.create(workshop_id, user_id, profile.dance_role)
        logger.info(
            "Enrolled user %s in workshop %s as record %s (%s)",
            user_id,
            workshop_id,
            record.id,
            profile.dance_role.name,
        )
        await self.match(tx, record, workshop, outbox, profile=profile)
        return record

    def find_candidate(
        self,
        record: EnrollmentRecord,
        records: Sequence[EnrollmentRecord],
    ) -> EnrollmentRecord | None:
        """Return the earliest waiting record that can pair with ``record``."""
        for candidate in sorted(records, key=lambda r: r.sequence):
            if can_pair(record, candidate):
                return candidate
        return None

    async def match(
        self,
        tx: EnrollmentTransaction,
        record: EnrollmentRecord,
        workshop: Workshop,
        outbox: list[PairingEvent],
        profile: UserProfile | None = None,
    ) -> EnrollmentRecord | None:
        """Pair a waiting record with the first compatible waiting record.

        On a match both records are confirmed and saved, and the waiting
        candidate is told about its new partner.

        Args:
            tx: Open workshop transaction.
            record: A WAITING record.
            workshop: The record's workshop.
            outbox: Receives the NewPartnerAssigned event.
            profile: Profile of the record's user, if already loaded.

        Returns:
            The matched candidate, or None if nobody was waiting.
        """
        if not is_waiting(record):
            return None

        candidate = self.find_candidate(record, await tx.find_by_workshop(workshop.id))
        if candidate is None:
            logger.debug(
                "No %s waiting in workshop %s, record %s stays on the waitlist",
                record.role.complement.name,
                workshop.id,
                record.id,
            )
            return None

        confirm_pair(record, candidate)
        await tx.save(record)
        await tx.save(candidate)

        if profile is None:
            partner = await self.participant(record)
        else:
            partner = Participant.from_profile(record.id, profile)
        outbox.append(
            NewPartnerAssigned(
                recipient=await self.participant(candidate),
                workshop=WorkshopSummary.from_workshop(workshop),
                partner=partner,
            )
        )
        logger.info(
            "Paired records %s and %s in workshop %s",
            record.id,
            candidate.id,
            workshop.id,
        )
        return candidate

    async def _resolve_partner(self, partner_email: str) -> UserProfile:
        return await self._directory.find_by_email(partner_email)

    async def direct_pair(
        self,
        tx: EnrollmentTransaction,
        user_id: int,
        partner_email: str,
        workshop_id: int,
        outbox: list[PairingEvent],
    ) -> tuple[EnrollmentRecord, EnrollmentRecord]:
        """Enroll two named users together, skipping the waitlist.

        Args:
            tx: Open workshop transaction.
            user_id: Requesting user.
            partner_email: Email of the partner to enroll with.
            workshop_id: Target workshop.
            outbox: Receives a NewPartnerAssigned event for the partner.

        Returns:
            The requester's and the partner's new CONFIRMED records.

        Raises:
            UserNotFoundError: If either user does not exist.
            WorkshopNotFoundError: If the workshop does not exist.
            SelfPairingError: If the partner email belongs to the requester.
            AlreadyEnrolledError: If either user already has a record.
            RoleMismatchError: If both users have the same role.
        """
        profile = await self._directory.find_by_id(user_id)
        partner_profile = await self._resolve_partner(partner_email)
        workshop = await self.load_workshop(tx, workshop_id)

        if partner_profile.id == profile.id:
            raise SelfPairingError(user_id)
        for someone in (profile, partner_profile):
            if await tx.find_by_workshop_and_user(workshop_id, someone.id) is not None:
                raise AlreadyEnrolledError(someone.id, workshop_id, email=someone.email)
        if partner_profile.dance_role != profile.dance_role.complement:
            raise RoleMismatchError(profile.dance_role.name, partner_profile.dance_role.name)

        record = await tx.create(workshop_id, profile.id, profile.dance_role)
        partner_record = await tx.create(
            workshop_id, partner_profile.id, partner_profile.dance_role
        )
        confirm_pair(record, partner_record)
        await tx.save(record)
        await tx.save(partner_record)

        outbox.append(
            NewPartnerAssigned(
                recipient=Participant.from_profile(partner_record.id, partner_profile),
                workshop=WorkshopSummary.from_workshop(workshop),
                partner=Participant.from_profile(record.id, profile),
            )
        )
        logger.info(
            "Directly paired users %s and %s in workshop %s (records %s, %s)",
            profile.id,
            partner_profile.id,
            workshop_id,
            record.id,
            partner_record.id,
        )
        return record, partner_record

    async def add_partner(
        self,
        tx: EnrollmentTransaction,
        user_id: int,
        partner_email: str,
        workshop_id: int,
        outbox: list[PairingEvent],
    ) -> tuple[EnrollmentRecord, EnrollmentRecord]:
        """Give a waiting user a named partner who is not yet enrolled.

        Args:
            tx: Open workshop transaction.
            user_id: Requesting user, already enrolled and WAITING.
            partner_email: Email of the partner to enroll.
            workshop_id: Target workshop.
            outbox: Receives a NewPartnerAssigned event for the partner.

        Returns:
            The requester's record and the partner's new record, both CONFIRMED.

        Raises:
            WorkshopNotFoundError: If the workshop does not exist.
            RecordNotFoundError: If the requester is not enrolled.
            AlreadyPairedError: If the requester already has a partner.
            UserNotFoundError: If the partner does not exist.
            SelfPairingError: If the partner email belongs to the requester.
            AlreadyEnrolledError: If the partner is already enrolled.
            RoleMismatchError: If the partner's role equals the requester's.
        """
        workshop = await self.load_workshop(tx, workshop_id)
        record = await tx.find_by_workshop_and_user(workshop_id, user_id)
        if record is None:
            raise RecordNotFoundError(user_id, workshop_id)
        if not is_waiting(record):
            raise AlreadyPairedError(record.id)

        partner_profile = await self._resolve_partner(partner_email)
        if partner_profile.id == user_id:
            raise SelfPairingError(user_id)
        if await tx.find_by_workshop_and_user(workshop_id, partner_profile.id) is not None:
            raise AlreadyEnrolledError(
                partner_profile.id, workshop_id, email=partner_profile.email
            )
        if partner_profile.dance_role != record.role.complement:
            raise RoleMismatchError(record.role.name, partner_profile.dance_role.name)

        partner_record = await tx.create(
            workshop_id, partner_profile.id, partner_profile.dance_role
        )
        confirm_pair(record, partner_record)
        await tx.save(record)
        await tx.save(partner_record)

        outbox.append(
            NewPartnerAssigned(
                recipient=Participant.from_profile(partner_record.id, partner_profile),
                workshop=WorkshopSummary.from_workshop(workshop),
                partner=await self.participant(record),
            )
        )
        logger.info(
            "User %s added partner %s in workshop %s",
            user_id,
            partner_profile.id,
            workshop_id,
        )
        return record, partner_record
