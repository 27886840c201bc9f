# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pairing domain exceptions.

Every failure of a pairing operation is raised synchronously as one of
these types. The offending identifiers are kept as attributes so callers
can build their own responses without parsing messages.
"""

from __future__ import annotations


class PairingError(Exception):
    """Base exception for pairing service errors."""

    pass


class UserNotFoundError(PairingError):
    """Raised when a user cannot be resolved by id or email."""

    def __init__(self, user_id: int | None = None, email: str | None = None) -> None:
        self.user_id = user_id
        self.email = email
        if email is not None:
            message = f"User with email {email} not found"
        else:
            message = f"User {user_id} not found"
        super().__init__(message)


class WorkshopNotFoundError(PairingError):
    """Raised when a workshop does not exist."""

    def __init__(self, workshop_id: int) -> None:
        self.workshop_id = workshop_id
        super().__init__(f"Workshop {workshop_id} not found")


class AlreadyEnrolledError(PairingError):
    """Raised when a user already holds a record for the workshop.

    Attributes:
        user_id: The conflicting user, which may be the requester or the
            named partner.
        workshop_id: Workshop identifier.
        email: Email of the conflicting user, when known.
    """

    def __init__(self, user_id: int, workshop_id: int, email: str | None = None) -> None:
        self.user_id = user_id
        self.workshop_id = workshop_id
        self.email = email
        who = email if email is not None else f"User {user_id}"
        super().__init__(f"{who} is already enrolled in workshop {workshop_id}")


class RoleMismatchError(PairingError):
    """Raised when a pair would not be exactly one leader and one follower."""

    def __init__(self, role: str, partner_role: str) -> None:
        self.role = role
        self.partner_role = partner_role
        super().__init__(
            "Pairing requires one LEADER and one FOLLOWER, "
            f"got {role} and {partner_role}"
        )


class SelfPairingError(PairingError):
    """Raised when a user names themself as partner."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} cannot be their own partner")


class AlreadyPairedError(PairingError):
    """Raised when adding a partner to a record that is already confirmed."""

    def __init__(self, record_id: int) -> None:
        self.record_id = record_id
        super().__init__(f"Enrollment record {record_id} already has a partner")


class RecordNotFoundError(PairingError):
    """Raised when no enrollment exists for a (user, workshop) pair."""

    def __init__(self, user_id: int, workshop_id: int) -> None:
        self.user_id = user_id
        self.workshop_id = workshop_id
        super().__init__(f"User {user_id} is not enrolled in workshop {workshop_id}")


class PartnerRecordNotFoundError(PairingError):
    """Raised when a record references a partner record that is missing.

    This is a data-integrity fault: the partner link is dangling.
    """

    def __init__(self, record_id: int, partner_id: int) -> None:
        self.record_id = record_id
        self.partner_id = partner_id
        super().__init__(
            f"Enrollment record {record_id} references missing partner record {partner_id}"
        )


class InvalidStateTransitionError(PairingError):
    """Raised when a record is asked to make a transition its state forbids."""

    pass


class StoreUnavailableError(PairingError):
    """Raised when the enrollment store fails or the workshop lock times out.

    Attributes:
        original_error: The underlying exception, if any.
    """

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error
