# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-workshop locks for serializing pairing transactions in-process."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from src.domains.pairing.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class WorkshopLockRegistry:
    """One asyncio.Lock per workshop id.

    Operations on different workshops never wait for each other. A lock
    only lives while some operation holds it or waits for it.

    Args:
        timeout: Seconds to wait for a lock before giving up.
    """

    def __init__(self, timeout: float) -> None:
        self._timeout = timeout
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def _checkout(self, workshop_id: int) -> asyncio.Lock:
        lock = self._locks.get(workshop_id)
        if lock is None:
            lock = self._locks[workshop_id] = asyncio.Lock()
        self._users[workshop_id] = self._users.get(workshop_id, 0) + 1
        return lock

    def _checkin(self, workshop_id: int) -> None:
        remaining = self._users[workshop_id] - 1
        if remaining:
            self._users[workshop_id] = remaining
        else:
            del self._users[workshop_id]
            del self._locks[workshop_id]

    @asynccontextmanager
    async def hold(self, workshop_id: int) -> AsyncIterator[None]:
        """Hold the workshop's lock for the duration of the block.

        Raises:
            StoreUnavailableError: If the lock is not acquired within the timeout.
        """
        lock = self._checkout(workshop_id)
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self._timeout)
            except asyncio.TimeoutError as e:
                logger.warning(
                    "Timed out after %.1fs waiting for workshop %s lock",
                    self._timeout,
                    workshop_id,
                )
                raise StoreUnavailableError(
                    f"Workshop {workshop_id} is busy, try again later", e
                ) from e
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(workshop_id)
