# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Collaborators the pairing core depends on.

The core reads users from a ``UserDirectory``, persists workshops and
enrollment records through an ``EnrollmentStore`` and hands events to a
``NotificationEmitter``. The SQL implementations live in
``src.infrastructure``; tests use in-memory fakes.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from src.models.common import DanceRole

if TYPE_CHECKING:
    from src.domains.pairing.events import PairingEvent
    from src.infrastructure.database.models import EnrollmentRecord, Workshop


@dataclass(frozen=True)
class UserProfile:
    """Read-only profile of a registered user."""

    id: int
    name: str
    surname: str
    email: str
    dance_role: DanceRole
    phone: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()


class UserDirectory(Protocol):
    """Resolves user profiles.

    Both lookups raise ``UserNotFoundError`` when no user matches.
    """

    async def find_by_id(self, user_id: int) -> UserProfile: ...

    async def find_by_email(self, email: str) -> UserProfile: ...


class EnrollmentTransaction(Protocol):
    """Store operations available inside one workshop-scoped transaction."""

    async def get_workshop(self, workshop_id: int) -> Workshop | None: ...

    async def find_by_workshop(self, workshop_id: int) -> list[EnrollmentRecord]:
        """Return the workshop's records ordered by ascending sequence."""
        ...

    async def find_by_workshop_and_user(
        self, workshop_id: int, user_id: int
    ) -> EnrollmentRecord | None: ...

    async def find_by_id(self, record_id: int) -> EnrollmentRecord | None: ...

    async def create(
        self, workshop_id: int, user_id: int, role: DanceRole
    ) -> EnrollmentRecord:
        """Persist a new WAITING record and assign its id and sequence."""
        ...

    async def save(self, record: EnrollmentRecord) -> None: ...

    async def delete(self, record: EnrollmentRecord) -> None: ...


class EnrollmentStore(Protocol):
    """Durable storage for workshops and enrollment records."""

    def transaction(
        self, workshop_id: int, *, exclusive: bool = True
    ) -> AbstractAsyncContextManager[EnrollmentTransaction]:
        """Open a transaction scoped to one workshop.

        Exclusive transactions are serialized per workshop. The
        transaction commits when the block exits normally and rolls back
        when it raises.

        Raises:
            StoreUnavailableError: If the workshop lock cannot be acquired
                in time or the backend fails.
        """
        ...


class NotificationEmitter(Protocol):
    """Receives pairing events once their transaction has committed."""

    async def publish(self, event: PairingEvent) -> None: ...
