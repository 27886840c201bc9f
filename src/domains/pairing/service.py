# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pairing service for workshop enrollment.

This module provides the PairingService class, the entry point for:
- Enrollment with automatic partner matching
- Enrolling two named users as a pair
- Adding a partner for a user on the waitlist
- Sign-out with partner re-pairing
- Membership queries and workshop rosters

Each state-changing call runs in one exclusive workshop transaction.
Events raised during the call are published only after it commits.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from src.domains.pairing.cascade import SignOutCascade
from src.domains.pairing.engine import PairingEngine
from src.domains.pairing.events import PairingEvent
from src.domains.pairing.ports import (
    EnrollmentStore,
    EnrollmentTransaction,
    NotificationEmitter,
    UserDirectory,
)
from src.models.common import PairingStatus
from src.models.pairing import (
    EnrollmentRecordView,
    PairingResult,
    RosterEntry,
    SignOutConfirmation,
)
from src.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PairingService:
    """Service for enrolling users in workshops and managing partners.

    Args:
        store: Enrollment store providing workshop transactions.
        directory: User directory for profile lookups.
        emitter: Receives committed events.
    """

    def __init__(
        self,
        store: EnrollmentStore,
        directory: UserDirectory,
        emitter: NotificationEmitter,
    ) -> None:
        self._store = store
        self._directory = directory
        self._emitter = emitter
        self._engine = PairingEngine(directory)
        self._cascade = SignOutCascade(self._engine)

    async def _run(
        self,
        workshop_id: int,
        operation: Callable[[EnrollmentTransaction, list[PairingEvent]], Awaitable[T]],
    ) -> T:
        """Run an operation in an exclusive transaction, then flush its events."""
        outbox: list[PairingEvent] = []
        bind_context(workshop_id=workshop_id)
        try:
            async with self._store.transaction(workshop_id) as tx:
                result = await operation(tx, outbox)
            await self._dispatch(outbox)
        finally:
            clear_context("workshop_id")
        return result

    async def _dispatch(self, outbox: list[PairingEvent]) -> None:
        for event in outbox:
            try:
                await self._emitter.publish(event)
            except Exception as e:
                logger.error(
                    "Failed to publish %s for record %s: %s",
                    event.event_type,
                    event.recipient.record_id,
                    str(e),
                    exc_info=True,
                )

    async def enroll(self, user_id: int, workshop_id: int) -> EnrollmentRecordView:
        """Enroll a user, pairing them with the first waiting partner.

        Args:
            user_id: User to enroll.
            workshop_id: Target workshop.

        Returns:
            The new enrollment record.

        Raises:
            UserNotFoundError: If the user does not exist.
            WorkshopNotFoundError: If the workshop does not exist.
            AlreadyEnrolledError: If the user is already enrolled.
            StoreUnavailableError: If the store fails.
        """

        async def operation(tx, outbox):
            record = await self._engine.enroll(tx, user_id, workshop_id, outbox)
            return EnrollmentRecordView.model_validate(record)

        return await self._run(workshop_id, operation)

    async def direct_pair(
        self,
        user_id: int,
        partner_email: str,
        workshop_id: int,
    ) -> PairingResult:
        """Enroll a user together with a named partner.

        Raises:
            UserNotFoundError: If either user does not exist.
            WorkshopNotFoundError: If the workshop does not exist.
            SelfPairingError: If the user names themself.
            AlreadyEnrolledError: If either user is already enrolled.
            RoleMismatchError: If both users have the same role.
            StoreUnavailableError: If the store fails.
        """

        async def operation(tx, outbox):
            record, partner_record = await self._engine.direct_pair(
                tx, user_id, partner_email, workshop_id, outbox
            )
            return _pairing_result(record, partner_record)

        return await self._run(workshop_id, operation)

    async def add_partner(
        self,
        user_id: int,
        partner_email: str,
        workshop_id: int,
    ) -> PairingResult:
        """Enroll a named partner for a user who is on the waitlist.

        Raises:
            WorkshopNotFoundError: If the workshop does not exist.
            RecordNotFoundError: If the user is not enrolled.
            AlreadyPairedError: If the user already has a partner.
            UserNotFoundError: If the partner does not exist.
            SelfPairingError: If the user names themself.
            AlreadyEnrolledError: If the partner is already enrolled.
            RoleMismatchError: If the roles do not complement each other.
            StoreUnavailableError: If the store fails.
        """

        async def operation(tx, outbox):
            record, partner_record = await self._engine.add_partner(
                tx, user_id, partner_email, workshop_id, outbox
            )
            return _pairing_result(record, partner_record)

        return await self._run(workshop_id, operation)

    async def sign_out(self, user_id: int, workshop_id: int) -> SignOutConfirmation:
        """Withdraw a user and re-pair their partner if they had one.

        Raises:
            WorkshopNotFoundError: If the workshop does not exist.
            RecordNotFoundError: If the user is not enrolled.
            PartnerRecordNotFoundError: If the partner link is dangling.
            StoreUnavailableError: If the store fails.
        """

        async def operation(tx, outbox):
            outcome = await self._cascade.sign_out(tx, user_id, workshop_id, outbox)
            return SignOutConfirmation(
                workshop_id=workshop_id,
                workshop_name=outcome.workshop.name,
                partner_affected=outcome.partner_affected,
                partner_rematched=outcome.partner_rematched,
                orphan_record_id=outcome.orphan.id if outcome.orphan else None,
                new_partner_record_id=(
                    outcome.new_partner.id if outcome.new_partner else None
                ),
            )

        return await self._run(workshop_id, operation)

    async def is_signed_up(self, user_id: int, workshop_id: int) -> bool:
        """Check whether the user has a record for the workshop."""
        async with self._store.transaction(workshop_id, exclusive=False) as tx:
            record = await tx.find_by_workshop_and_user(workshop_id, user_id)
        return record is not None

    async def has_partner(self, user_id: int, workshop_id: int) -> bool:
        """Check whether the user is enrolled and CONFIRMED."""
        async with self._store.transaction(workshop_id, exclusive=False) as tx:
            record = await tx.find_by_workshop_and_user(workshop_id, user_id)
        return record is not None and record.status == PairingStatus.CONFIRMED

    async def list_roster(self, workshop_id: int) -> list[RosterEntry]:
        """List a workshop's participants in enrollment order.

        Raises:
            WorkshopNotFoundError: If the workshop does not exist.
            UserNotFoundError: If a record references an unknown user.
        """
        async with self._store.transaction(workshop_id, exclusive=False) as tx:
            await self._engine.load_workshop(tx, workshop_id)
            records = await tx.find_by_workshop(workshop_id)

        by_id = {record.id: record for record in records}
        profiles = {
            record.user_id: await self._directory.find_by_id(record.user_id)
            for record in records
        }

        roster = []
        for record in records:
            profile = profiles[record.user_id]
            partner = by_id.get(record.partner_id) if record.partner_id else None
            roster.append(
                RosterEntry(
                    record_id=record.id,
                    user_id=record.user_id,
                    name=profile.name,
                    surname=profile.surname,
                    email=profile.email,
                    phone=profile.phone,
                    role=record.role,
                    status=record.status,
                    partner_name=(
                        profiles[partner.user_id].full_name if partner is not None else None
                    ),
                )
            )
        return roster


def _pairing_result(record, partner_record) -> PairingResult:
    return PairingResult(
        record=EnrollmentRecordView.model_validate(record),
        partner_record=EnrollmentRecordView.model_validate(partner_record),
    )
