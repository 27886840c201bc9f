# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for PairingService."""

import asyncio

import pytest
import structlog

from src.domains.pairing import PairingService
from src.domains.pairing.engine import PairingEngine
from src.domains.pairing.errors import (
    AlreadyEnrolledError,
    RecordNotFoundError,
    StoreUnavailableError,
    WorkshopNotFoundError,
)
from src.domains.pairing.events import (
    NewPartnerAssigned,
    PartnerReassigned,
    PartnerWithdrew,
)
from src.domains.pairing.state import check_invariants
from src.infrastructure.events import EventTypes
from src.models.common import DanceRole, PairingStatus
from src.models.pairing import EnrollmentRecordView


class TestWorkshopWalkthrough:
    """End-to-end enrollment story for one workshop."""

    @pytest.mark.asyncio
    async def test_full_story(self, service, directory, store, emitter, workshop_id):
        """Test enrolling, signing out and direct pairing in sequence."""
        directory.add(5, "Eva", DanceRole.LEADER)
        directory.add(6, "Fede", DanceRole.FOLLOWER)
        a, b, c, d = 1, 3, 2, 4

        # A leader enrolls into an empty workshop
        record_a = await service.enroll(a, workshop_id)
        assert record_a.status == PairingStatus.WAITING
        assert record_a.role == DanceRole.LEADER
        assert emitter.events == []

        # A follower is matched with the waiting leader
        record_b = await service.enroll(b, workshop_id)
        assert record_b.status == PairingStatus.CONFIRMED
        assert record_b.partner_id == record_a.id
        assert store.records[record_a.id].partner_id == record_b.id
        (assigned,) = emitter.events
        assert isinstance(assigned, NewPartnerAssigned)
        assert assigned.recipient.user_id == a
        assert assigned.partner.user_id == b

        # A second leader finds nobody
        record_c = await service.enroll(c, workshop_id)
        assert record_c.status == PairingStatus.WAITING

        # The follower leaves and the first leader waits again
        emitter.clear()
        confirmation = await service.sign_out(b, workshop_id)
        assert confirmation.partner_affected is True
        assert confirmation.partner_rematched is False
        assert confirmation.orphan_record_id == record_a.id
        assert store.records[record_a.id].status == PairingStatus.WAITING
        (withdrew,) = emitter.events
        assert isinstance(withdrew, PartnerWithdrew)
        assert withdrew.recipient.user_id == a
        assert withdrew.former_partner.user_id == b

        # A new follower goes to the longest waiting leader
        emitter.clear()
        record_d = await service.enroll(d, workshop_id)
        assert record_d.partner_id == record_a.id
        assert store.records[record_c.id].status == PairingStatus.WAITING
        (assigned,) = emitter.events
        assert assigned.recipient.user_id == a
        assert assigned.partner.user_id == d

        # Two outsiders pair directly and skip the waitlist
        result = await service.direct_pair(5, "fede@example.com", workshop_id)
        assert result.record.status == PairingStatus.CONFIRMED
        assert result.partner_record.status == PairingStatus.CONFIRMED
        assert result.record.partner_id == result.partner_record.id
        assert result.partner_record.partner_id == result.record.id
        assert store.records[record_c.id].status == PairingStatus.WAITING

        assert check_invariants(store.records_of(workshop_id)) == []


class TestEnroll:
    """Tests for PairingService.enroll."""

    @pytest.mark.asyncio
    async def test_returns_view(self, service, workshop_id):
        """Test enroll returns a detached view of the record."""
        view = await service.enroll(1, workshop_id)

        assert isinstance(view, EnrollmentRecordView)
        assert view.workshop_id == workshop_id
        assert view.user_id == 1
        assert view.sequence == 1
        assert view.is_confirmed is False

    @pytest.mark.asyncio
    async def test_duplicate_leaves_original(self, service, store, emitter, workshop_id):
        """Test a duplicate enrollment fails and changes nothing."""
        await service.enroll(1, workshop_id)
        await service.enroll(3, workshop_id)
        before = [(r.id, r.status, r.partner_id) for r in store.records_of(workshop_id)]
        emitter.clear()

        with pytest.raises(AlreadyEnrolledError):
            await service.enroll(3, workshop_id)

        after = [(r.id, r.status, r.partner_id) for r in store.records_of(workshop_id)]
        assert after == before
        assert emitter.events == []

    @pytest.mark.asyncio
    async def test_store_unavailable(self, service, store, workshop_id):
        """Test store failures surface as StoreUnavailableError."""
        store.fail_with = ConnectionError("database is down")

        with pytest.raises(StoreUnavailableError) as exc_info:
            await service.enroll(1, workshop_id)

        assert isinstance(exc_info.value.original_error, ConnectionError)


class TestSignOut:
    """Tests for PairingService.sign_out."""

    @pytest.mark.asyncio
    async def test_not_enrolled(self, service, store, emitter, workshop_id):
        """Test signing out twice fails the second time without side effects."""
        await service.enroll(1, workshop_id)
        await service.sign_out(1, workshop_id)
        saves = store.saves

        with pytest.raises(RecordNotFoundError):
            await service.sign_out(1, workshop_id)

        assert store.saves == saves
        assert store.records == {}
        assert emitter.events == []

    @pytest.mark.asyncio
    async def test_confirmation_on_rematch(self, service, emitter, workshop_id):
        """Test the confirmation reports the new partner."""
        await service.enroll(1, workshop_id)
        follower = await service.enroll(3, workshop_id)
        waiting = await service.enroll(2, workshop_id)
        emitter.clear()

        confirmation = await service.sign_out(1, workshop_id)

        assert confirmation.workshop_name == "Salsa Basics"
        assert confirmation.partner_rematched is True
        assert confirmation.orphan_record_id == follower.id
        assert confirmation.new_partner_record_id == waiting.id
        assert len(emitter.of_type(PartnerReassigned)) == 1
        assert len(emitter.of_type(NewPartnerAssigned)) == 1


class TestPartnerOperations:
    """Tests for direct_pair and add_partner through the service."""

    @pytest.mark.asyncio
    async def test_add_partner(self, service, emitter, workshop_id):
        """Test a waiting user brings their own partner."""
        await service.enroll(1, workshop_id)

        result = await service.add_partner(1, "Fia@Example.com", workshop_id)

        assert result.record.user_id == 1
        assert result.partner_record.user_id == 3
        assert result.record.partner_id == result.partner_record.id
        (event,) = emitter.events
        assert event.recipient.user_id == 3

    @pytest.mark.asyncio
    async def test_direct_pair_failure_rolls_back(self, service, store, workshop_id):
        """Test a failing direct pair leaves no partial records."""
        await service.enroll(3, workshop_id)

        with pytest.raises(AlreadyEnrolledError):
            await service.direct_pair(1, "fia@example.com", workshop_id)

        assert [r.user_id for r in store.records_of(workshop_id)] == [3]


class TestQueries:
    """Tests for membership queries and rosters."""

    @pytest.mark.asyncio
    async def test_is_signed_up(self, service, workshop_id):
        """Test membership reflects enrollment."""
        assert await service.is_signed_up(1, workshop_id) is False

        await service.enroll(1, workshop_id)

        assert await service.is_signed_up(1, workshop_id) is True
        assert await service.is_signed_up(1, workshop_id + 1) is False

    @pytest.mark.asyncio
    async def test_has_partner(self, service, workshop_id):
        """Test has_partner is true only for confirmed records."""
        await service.enroll(1, workshop_id)
        assert await service.has_partner(1, workshop_id) is False

        await service.enroll(3, workshop_id)

        assert await service.has_partner(1, workshop_id) is True
        assert await service.has_partner(3, workshop_id) is True
        assert await service.has_partner(2, workshop_id) is False

    @pytest.mark.asyncio
    async def test_list_roster(self, service, directory, workshop_id):
        """Test the roster lists participants in enrollment order."""
        directory.add(3, "Fia", DanceRole.FOLLOWER, phone="555-0101")
        await service.enroll(1, workshop_id)
        await service.enroll(2, workshop_id)
        await service.enroll(3, workshop_id)

        roster = await service.list_roster(workshop_id)

        assert [entry.user_id for entry in roster] == [1, 2, 3]
        leo, luis, fia = roster
        assert leo.partner_name == "Fia Tester"
        assert fia.partner_name == "Leo Tester"
        assert fia.phone == "555-0101"
        assert luis.status == PairingStatus.WAITING
        assert luis.partner_name is None

    @pytest.mark.asyncio
    async def test_list_roster_unknown_workshop(self, service):
        """Test listing an unknown workshop fails."""
        with pytest.raises(WorkshopNotFoundError):
            await service.list_roster(404)


class TestEventDelivery:
    """Tests for publishing events after commit."""

    @pytest.mark.asyncio
    async def test_publishes_after_commit(self, store, directory, workshop_id):
        """Test events are only handed over once the transaction committed."""
        seen_commits = []

        class CommitWatcher:
            async def publish(self, event):
                seen_commits.append(store.commits)

        service = PairingService(store, directory, CommitWatcher())
        await service.enroll(1, workshop_id)
        commits_before = store.commits

        await service.enroll(3, workshop_id)

        assert seen_commits == [commits_before + 1]

    @pytest.mark.asyncio
    async def test_failed_operation_publishes_nothing(
        self, service, store, emitter, workshop_id, monkeypatch
    ):
        """Test a rollback discards the events raised before it."""
        await service.enroll(1, workshop_id)
        original_match = PairingEngine.match

        async def match_then_fail(self, *args, **kwargs):
            await original_match(self, *args, **kwargs)
            raise RuntimeError("boom")

        monkeypatch.setattr(PairingEngine, "match", match_then_fail)

        with pytest.raises(RuntimeError):
            await service.enroll(3, workshop_id)

        assert emitter.events == []
        assert store.record_of(workshop_id, 3) is None
        assert store.records_of(workshop_id)[0].status == PairingStatus.WAITING

    @pytest.mark.asyncio
    async def test_publish_failure_does_not_raise(self, service, store, emitter, workshop_id):
        """Test delivery errors are logged and the change stays committed."""
        emitter.fail_on.add(EventTypes.Pairing.PARTNER_ASSIGNED)
        await service.enroll(1, workshop_id)

        record = await service.enroll(3, workshop_id)

        assert record.status == PairingStatus.CONFIRMED
        assert store.record_of(workshop_id, 3).status == PairingStatus.CONFIRMED
        assert emitter.events == []

    @pytest.mark.asyncio
    async def test_publish_failure_keeps_later_events(self, service, emitter, workshop_id):
        """Test one failed delivery does not stop the rest."""
        await service.enroll(1, workshop_id)
        await service.enroll(3, workshop_id)
        await service.enroll(2, workshop_id)
        emitter.clear()
        emitter.fail_on.add(EventTypes.Pairing.PARTNER_ASSIGNED)

        await service.sign_out(1, workshop_id)

        assert [type(event) for event in emitter.events] == [PartnerReassigned]

    @pytest.mark.asyncio
    async def test_workshop_bound_to_log_context(self, service, emitter, workshop_id):
        """Test logs during an operation carry the workshop id."""
        structlog.contextvars.bind_contextvars(request_id="req-1")
        try:
            await service.enroll(1, workshop_id)
            await service.enroll(3, workshop_id)

            assert emitter.contexts == [{"request_id": "req-1", "workshop_id": workshop_id}]
            assert structlog.contextvars.get_contextvars() == {"request_id": "req-1"}
        finally:
            structlog.contextvars.clear_contextvars()

    @pytest.mark.asyncio
    async def test_log_context_cleared_on_error(self, service):
        with pytest.raises(WorkshopNotFoundError):
            await service.enroll(1, 999)

        assert "workshop_id" not in structlog.contextvars.get_contextvars()


class TestConcurrency:
    """Tests for concurrent operations on one workshop."""

    @pytest.mark.asyncio
    async def test_concurrent_enrollments_pair_everyone(
        self, service, directory, store, workshop_id
    ):
        """Test simultaneous enrollments never leave a missed match."""
        for user_id in range(10, 30):
            role = DanceRole.LEADER if user_id % 2 else DanceRole.FOLLOWER
            directory.add(user_id, f"User{user_id}", role)

        await asyncio.gather(
            *(service.enroll(user_id, workshop_id) for user_id in range(10, 30))
        )

        records = store.records_of(workshop_id)
        assert len(records) == 20
        assert all(record.status == PairingStatus.CONFIRMED for record in records)
        assert check_invariants(records) == []

    @pytest.mark.asyncio
    async def test_concurrent_sign_outs_keep_invariants(
        self, service, directory, store, workshop_id
    ):
        """Test interleaved sign-outs and enrollments stay consistent."""
        for user_id in range(10, 22):
            role = DanceRole.LEADER if user_id % 3 else DanceRole.FOLLOWER
            directory.add(user_id, f"User{user_id}", role)
        for user_id in range(10, 18):
            await service.enroll(user_id, workshop_id)

        await asyncio.gather(
            service.sign_out(10, workshop_id),
            service.sign_out(12, workshop_id),
            service.enroll(18, workshop_id),
            service.sign_out(15, workshop_id),
            service.enroll(19, workshop_id),
            service.enroll(20, workshop_id),
            service.enroll(21, workshop_id),
        )

        assert check_invariants(store.records_of(workshop_id)) == []

    @pytest.mark.asyncio
    async def test_duplicate_concurrent_enrollment(self, service, store, workshop_id):
        """Test only one of two racing enrollments of a user succeeds."""
        results = await asyncio.gather(
            service.enroll(1, workshop_id),
            service.enroll(1, workshop_id),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], AlreadyEnrolledError)
        assert len(store.records_of(workshop_id)) == 1
