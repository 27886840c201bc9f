# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Workshop partner pairing domain.

Enrolls users into workshops and keeps every confirmed attendee paired
with exactly one partner of the complementary dance role.

Example:
    >>> service = PairingService(store, directory, emitter)
    >>> record = await service.enroll(user_id=4, workshop_id=1)
    >>> record.status
    <PairingStatus.WAITING: 'waiting'>
"""

from src.domains.pairing.cascade import SignOutCascade, SignOutOutcome
from src.domains.pairing.engine import PairingEngine
from src.domains.pairing.errors import (
    AlreadyEnrolledError,
    AlreadyPairedError,
    InvalidStateTransitionError,
    PairingError,
    PartnerRecordNotFoundError,
    RecordNotFoundError,
    RoleMismatchError,
    SelfPairingError,
    StoreUnavailableError,
    UserNotFoundError,
    WorkshopNotFoundError,
)
from src.domains.pairing.events import (
    DeltaKind,
    NewPartnerAssigned,
    PairingEvent,
    Participant,
    PartnerReassigned,
    PartnerWithdrew,
    WorkshopChanged,
    WorkshopDelta,
    WorkshopSummary,
)
from src.domains.pairing.ports import (
    EnrollmentStore,
    EnrollmentTransaction,
    NotificationEmitter,
    UserDirectory,
    UserProfile,
)
from src.domains.pairing.service import PairingService

__all__ = [
    # Service
    "PairingService",
    "PairingEngine",
    "SignOutCascade",
    "SignOutOutcome",
    # Ports
    "EnrollmentStore",
    "EnrollmentTransaction",
    "NotificationEmitter",
    "UserDirectory",
    "UserProfile",
    # Events
    "PairingEvent",
    "Participant",
    "WorkshopSummary",
    "NewPartnerAssigned",
    "PartnerWithdrew",
    "PartnerReassigned",
    "WorkshopChanged",
    "WorkshopDelta",
    "DeltaKind",
    # Errors
    "PairingError",
    "UserNotFoundError",
    "WorkshopNotFoundError",
    "AlreadyEnrolledError",
    "AlreadyPairedError",
    "RoleMismatchError",
    "SelfPairingError",
    "RecordNotFoundError",
    "PartnerRecordNotFoundError",
    "InvalidStateTransitionError",
    "StoreUnavailableError",
]
