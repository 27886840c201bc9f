# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Workshop change propagation.

Notifies every enrolled member when a workshop is modified or cancelled.
Propagation is best effort: a failure for one member is logged and the
remaining members are still notified.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from src.domains.pairing.errors import WorkshopNotFoundError
from src.domains.pairing.events import (
    Participant,
    WorkshopChanged,
    WorkshopDelta,
    WorkshopSummary,
)
from src.domains.pairing.ports import EnrollmentStore, NotificationEmitter, UserDirectory
from src.domains.workshop.changes import WorkshopLike, cancellation_delta, describe_changes
from src.utils.datetime import utc_now
from src.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)


@dataclass
class PropagationReport:
    """Result of notifying a workshop's members.

    Attributes:
        workshop_id: Workshop that changed.
        deltas: Changes that were announced.
        notified: Record ids that were notified.
        failed: Record ids whose notification failed.
    """

    workshop_id: int
    deltas: list[WorkshopDelta] = field(default_factory=list)
    notified: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


class WorkshopChangeService:
    """Publishes WorkshopChanged events to a workshop's members.

    Args:
        store: Enrollment store, used read-only.
        directory: User directory for recipient profiles.
        emitter: Receives one event per enrolled record.
        date_format: strftime pattern for dates in change descriptions.
    """

    def __init__(
        self,
        store: EnrollmentStore,
        directory: UserDirectory,
        emitter: NotificationEmitter,
        date_format: str = "%d-%m-%Y",
    ) -> None:
        self._store = store
        self._directory = directory
        self._emitter = emitter
        self._date_format = date_format

    async def on_workshop_changed(
        self,
        workshop_id: int,
        deltas: Sequence[WorkshopDelta],
        summary: WorkshopSummary | None = None,
    ) -> PropagationReport:
        """Notify every member of a workshop about the given changes.

        Args:
            workshop_id: The changed workshop.
            deltas: Changes to announce.
            summary: Workshop details to show. Loaded from the store when
                omitted.

        Returns:
            Which records were and were not notified.

        Raises:
            WorkshopNotFoundError: If the workshop does not exist.
        """
        bind_context(workshop_id=workshop_id)
        try:
            return await self._propagate(workshop_id, deltas, summary)
        finally:
            clear_context("workshop_id")

    async def _propagate(
        self,
        workshop_id: int,
        deltas: Sequence[WorkshopDelta],
        summary: WorkshopSummary | None,
    ) -> PropagationReport:
        async with self._store.transaction(workshop_id, exclusive=False) as tx:
            workshop = await tx.get_workshop(workshop_id)
            if workshop is None:
                raise WorkshopNotFoundError(workshop_id)
            records = await tx.find_by_workshop(workshop_id)

        if summary is None:
            summary = WorkshopSummary.from_workshop(workshop)
        report = PropagationReport(workshop_id=workshop_id, deltas=list(deltas))
        if not deltas:
            return report

        for record in records:
            try:
                profile = await self._directory.find_by_id(record.user_id)
                await self._emitter.publish(
                    WorkshopChanged(
                        recipient=Participant.from_profile(record.id, profile),
                        workshop=summary,
                        deltas=tuple(deltas),
                    )
                )
            except Exception as e:
                logger.error(
                    "Failed to notify record %s about workshop %s: %s",
                    record.id,
                    workshop_id,
                    str(e),
                    exc_info=True,
                )
                report.failed.append(record.id)
            else:
                report.notified.append(record.id)

        logger.info(
            "Workshop %s change propagated to %d members (%d failed)",
            workshop_id,
            len(report.notified),
            len(report.failed),
        )
        return report

    async def on_workshop_updated(
        self,
        workshop_id: int,
        before: WorkshopLike,
        after: WorkshopLike,
    ) -> PropagationReport:
        """Diff two versions of a workshop and notify members of the changes."""
        deltas = describe_changes(before, after, self._date_format)
        if not deltas:
            logger.debug("Workshop %s updated without visible changes", workshop_id)
        return await self.on_workshop_changed(workshop_id, deltas)

    async def on_workshop_cancelled(
        self,
        workshop_id: int,
        today: date | None = None,
    ) -> PropagationReport:
        """Tell members that a workshop is cancelled.

        Must be called before the workshop and its records are deleted.
        Workshops whose date has already passed are cancelled silently.

        Args:
            workshop_id: The workshop being cancelled.
            today: Reference date, defaults to the current UTC date.

        Raises:
            WorkshopNotFoundError: If the workshop does not exist.
        """
        async with self._store.transaction(workshop_id, exclusive=False) as tx:
            workshop = await tx.get_workshop(workshop_id)
            if workshop is None:
                raise WorkshopNotFoundError(workshop_id)
            summary = WorkshopSummary.from_workshop(workshop)

        today = today or utc_now().date()
        if summary.date is not None and summary.date < today:
            logger.info("Workshop %s already took place, cancelling silently", workshop_id)
            return PropagationReport(workshop_id=workshop_id)

        delta = cancellation_delta(summary, self._date_format)
        return await self.on_workshop_changed(workshop_id, [delta], summary=summary)
