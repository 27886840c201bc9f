# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment record state machine.

A record is always in one of four states, the product of its fixed role
and its pairing status: WAITING(LEADER), WAITING(FOLLOWER),
CONFIRMED(LEADER) or CONFIRMED(FOLLOWER). The only transitions are
confirming two waiting records of complementary roles into a pair, and
releasing a confirmed record back to waiting when its partner leaves.
Deletion is terminal and handled by the store.

The functions here operate on any object exposing ``id``, ``workshop_id``,
``role``, ``status`` and ``partner_id``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from src.domains.pairing.errors import InvalidStateTransitionError
from src.models.common import DanceRole, PairingStatus


class PairableRecord(Protocol):
    """Structural type of an enrollment record."""

    id: int
    workshop_id: int
    role: DanceRole
    status: PairingStatus
    partner_id: int | None


@dataclass(frozen=True)
class PairingState:
    """A (status, role) pair."""

    status: PairingStatus
    role: DanceRole

    @classmethod
    def of(cls, record: PairableRecord) -> PairingState:
        return cls(status=record.status, role=record.role)

    def __str__(self) -> str:
        return f"{self.status.name}({self.role.name})"


def is_waiting(record: PairableRecord) -> bool:
    return record.status == PairingStatus.WAITING


def can_pair(record: PairableRecord, candidate: PairableRecord) -> bool:
    """Check whether two records may be confirmed as partners."""
    return (
        record.id != candidate.id
        and record.workshop_id == candidate.workshop_id
        and is_waiting(record)
        and is_waiting(candidate)
        and candidate.role == record.role.complement
    )


def confirm_pair(record: PairableRecord, candidate: PairableRecord) -> None:
    """Move two waiting records to CONFIRMED, each referencing the other.

    Args:
        record: First record, WAITING.
        candidate: Second record, WAITING with the complementary role.

    Raises:
        InvalidStateTransitionError: If either record is already confirmed,
            the roles are equal, the workshops differ or both arguments
            are the same record.
    """
    if record.id == candidate.id:
        raise InvalidStateTransitionError(f"Record {record.id} cannot be paired with itself")
    if record.workshop_id != candidate.workshop_id:
        raise InvalidStateTransitionError(
            f"Records {record.id} and {candidate.id} belong to different workshops"
        )
    for current in (record, candidate):
        if not is_waiting(current):
            raise InvalidStateTransitionError(
                f"Record {current.id} is {PairingState.of(current)} and cannot be confirmed"
            )
    if candidate.role != record.role.complement:
        raise InvalidStateTransitionError(
            f"Records {record.id} and {candidate.id} are both {record.role.name}"
        )

    record.status = PairingStatus.CONFIRMED
    record.partner_id = candidate.id
    candidate.status = PairingStatus.CONFIRMED
    candidate.partner_id = record.id


def release(record: PairableRecord) -> None:
    """Return a confirmed record to WAITING and clear its partner.

    Raises:
        InvalidStateTransitionError: If the record is not confirmed.
    """
    if record.status != PairingStatus.CONFIRMED:
        raise InvalidStateTransitionError(
            f"Record {record.id} is {PairingState.of(record)} and cannot be released"
        )
    record.status = PairingStatus.WAITING
    record.partner_id = None


def check_invariants(records: Iterable[PairableRecord]) -> list[str]:
    """Collect pairing invariant violations for one workshop's records.

    Checks partner symmetry, agreement between status and partner id,
    that every pair is one leader and one follower, and that no leader
    and follower are left waiting side by side.

    Returns:
        Human-readable violations; empty when the records are consistent.
    """
    records = list(records)
    by_id = {record.id: record for record in records}
    violations: list[str] = []

    for record in records:
        confirmed = record.status == PairingStatus.CONFIRMED
        if confirmed != (record.partner_id is not None):
            violations.append(
                f"record {record.id} is {PairingState.of(record)} "
                f"with partner_id={record.partner_id}"
            )
        if record.partner_id is None:
            continue
        partner = by_id.get(record.partner_id)
        if partner is None:
            violations.append(f"record {record.id} references missing record {record.partner_id}")
            continue
        if partner.partner_id != record.id:
            violations.append(
                f"record {record.id} -> {partner.id} is not reciprocated "
                f"({partner.id} -> {partner.partner_id})"
            )
        if partner.role == record.role:
            violations.append(
                f"records {record.id} and {partner.id} are both {record.role.name}"
            )

    waiting_roles = {record.role for record in records if is_waiting(record)}
    if waiting_roles == {DanceRole.LEADER, DanceRole.FOLLOWER}:
        violations.append("a leader and a follower are both waiting")

    return violations
