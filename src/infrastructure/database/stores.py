# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy implementations of the pairing store and user directory.

Exclusive transactions are serialized twice: by an in-process lock per
workshop and by ``SELECT ... FOR UPDATE`` on the workshop row, which
serializes writers across processes on PostgreSQL. SQLite ignores the
row lock and relies on its database-level write lock.
"""

import logging
from contextlib import asynccontextmanager, nullcontext
from typing import AsyncIterator

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domains.pairing.errors import (
    AlreadyEnrolledError,
    StoreUnavailableError,
    UserNotFoundError,
)
from src.domains.pairing.ports import UserProfile
from src.infrastructure.database.locks import WorkshopLockRegistry
from src.infrastructure.database.models import EnrollmentRecord, User, Workshop
from src.models.common import DanceRole, PairingStatus
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class SqlEnrollmentTransaction:
    """Store operations bound to one session inside an open transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def lock_workshop(self, workshop_id: int) -> None:
        """Take the row lock on the workshop, if it exists."""
        await self._session.execute(
            select(Workshop.id).where(Workshop.id == workshop_id).with_for_update()
        )

    async def get_workshop(self, workshop_id: int) -> Workshop | None:
        return await self._session.get(Workshop, workshop_id)

    async def find_by_workshop(self, workshop_id: int) -> list[EnrollmentRecord]:
        result = await self._session.execute(
            select(EnrollmentRecord)
            .where(EnrollmentRecord.workshop_id == workshop_id)
            .order_by(EnrollmentRecord.sequence)
        )
        return list(result.scalars().all())

    async def find_by_workshop_and_user(
        self, workshop_id: int, user_id: int
    ) -> EnrollmentRecord | None:
        result = await self._session.execute(
            select(EnrollmentRecord).where(
                EnrollmentRecord.workshop_id == workshop_id,
                EnrollmentRecord.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, record_id: int) -> EnrollmentRecord | None:
        return await self._session.get(EnrollmentRecord, record_id)

    async def create(
        self, workshop_id: int, user_id: int, role: DanceRole
    ) -> EnrollmentRecord:
        """Insert a WAITING record at the end of the workshop's queue.

        Raises:
            AlreadyEnrolledError: If the unique (workshop, user) constraint
                rejects the insert.
        """
        last = await self._session.scalar(
            select(func.max(EnrollmentRecord.sequence)).where(
                EnrollmentRecord.workshop_id == workshop_id
            )
        )
        record = EnrollmentRecord(
            workshop_id=workshop_id,
            user_id=user_id,
            role=role,
            status=PairingStatus.WAITING,
            partner_id=None,
            sequence=(last or 0) + 1,
            created_at=utc_now(),
            updated_at=utc_now(),
        )
        self._session.add(record)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise AlreadyEnrolledError(user_id, workshop_id) from e
        return record

    async def save(self, record: EnrollmentRecord) -> None:
        self._session.add(record)
        await self._session.flush()

    async def delete(self, record: EnrollmentRecord) -> None:
        await self._session.delete(record)
        await self._session.flush()


class SqlEnrollmentStore:
    """Enrollment store backed by SQLAlchemy.

    Args:
        sessionmaker: Factory for async sessions.
        lock_timeout: Seconds to wait for the per-workshop lock.

    Example:
        store = SqlEnrollmentStore(get_sessionmaker(), settings.pairing.lock_timeout_seconds)
        async with store.transaction(workshop_id) as tx:
            records = await tx.find_by_workshop(workshop_id)
    """

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        lock_timeout: float = 10.0,
    ) -> None:
        self._sessionmaker = sessionmaker
        self._locks = WorkshopLockRegistry(lock_timeout)

    @asynccontextmanager
    async def transaction(
        self, workshop_id: int, *, exclusive: bool = True
    ) -> AsyncIterator[SqlEnrollmentTransaction]:
        """Open a transaction scoped to one workshop.

        Commits when the block exits normally, rolls back otherwise.

        Raises:
            StoreUnavailableError: On lock timeout or database failure.
        """
        guard = self._locks.hold(workshop_id) if exclusive else nullcontext()
        async with guard:
            try:
                async with self._sessionmaker() as session:
                    async with session.begin():
                        tx = SqlEnrollmentTransaction(session)
                        if exclusive:
                            await tx.lock_workshop(workshop_id)
                        yield tx
            except SQLAlchemyError as e:
                logger.error(
                    "Enrollment store failure for workshop %s: %s",
                    workshop_id,
                    str(e),
                    exc_info=True,
                )
                raise StoreUnavailableError("Enrollment store operation failed", e) from e


def _to_profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        name=user.name,
        surname=user.surname or "",
        email=user.email,
        dance_role=DanceRole.parse(user.dance_role),
        phone=user.phone,
    )


class SqlUserDirectory:
    """Reads user profiles from the users table.

    Args:
        sessionmaker: Factory for async sessions.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def find_by_id(self, user_id: int) -> UserProfile:
        try:
            async with self._sessionmaker() as session:
                user = await session.get(User, user_id)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("User lookup failed", e) from e
        if user is None:
            raise UserNotFoundError(user_id=user_id)
        return _to_profile(user)

    async def find_by_email(self, email: str) -> UserProfile:
        try:
            async with self._sessionmaker() as session:
                user = await session.scalar(
                    select(User).where(func.lower(User.email) == email.strip().lower())
                )
        except SQLAlchemyError as e:
            raise StoreUnavailableError("User lookup failed", e) from e
        if user is None:
            raise UserNotFoundError(email=email)
        return _to_profile(user)
