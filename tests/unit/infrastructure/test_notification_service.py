# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for notification templates and PairingNotificationService."""

import asyncio
import time

import pytest

from src.core.config import NotificationSettings
from src.domains.pairing import PairingService
from src.domains.workshop import WorkshopChangeService
from src.infrastructure.events import EventBus, EventBusEmitter, EventData, EventTypes
from src.infrastructure.notifications import (
    BaseChannel,
    ChannelType,
    DeliveryStatus,
    PairingNotificationService,
    render,
)
from src.models.common import PairingStatus


class RecordingChannel(BaseChannel):
    """Channel that keeps every payload it is asked to send."""

    def __init__(self, error: Exception | None = None) -> None:
        super().__init__()
        self.sent = []
        self.error = error

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.EMAIL

    async def send(self, payload):
        if self.error is not None:
            raise self.error
        self.sent.append(payload)
        return self.create_success_result(message_id=f"msg-{len(self.sent)}")


class SlowChannel(RecordingChannel):
    """Channel that takes a while before sending."""

    def __init__(self, delay: float, error: Exception | None = None) -> None:
        super().__init__(error=error)
        self.delay = delay
        self.attempts = 0

    async def send(self, payload):
        self.attempts += 1
        await asyncio.sleep(self.delay)
        return await super().send(payload)


def participant(record_id, name, email):
    return {
        "record_id": record_id,
        "user_id": record_id,
        "name": name,
        "surname": "Tester",
        "email": email,
        "full_name": f"{name} Tester",
    }


WORKSHOP = {
    "id": 1,
    "name": "Salsa Basics",
    "modality": "Salsa",
    "instructors": ["Sara", "Tomas"],
    "date": "2030-05-17",
    "time": "20:30",
    "location": "Main Hall",
}
LEO = participant(1, "Leo", "leo@example.com")
FIA = participant(2, "Fia", "fia@example.com")
FLOR = participant(3, "Flor", "flor@example.com")


@pytest.fixture
def settings():
    return NotificationSettings(site_url="https://dance.example.com/profile")


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def notifications(settings, channel):
    return PairingNotificationService(settings, channels=[channel])


class TestTemplates:
    """Tests for message rendering."""

    def test_partner_assigned(self):
        rendered = render(
            EventTypes.Pairing.PARTNER_ASSIGNED,
            {"recipient": LEO, "workshop": WORKSHOP, "partner": FIA},
        )

        assert rendered.title == "Partner for the workshop: Salsa Basics"
        assert rendered.message.startswith("Hello Leo,")
        assert "Fia Tester will be your partner" in rendered.message
        assert "on 17-05-2030 at Main Hall" in rendered.message

    def test_partner_withdrew(self):
        rendered = render(
            EventTypes.Pairing.PARTNER_WITHDREW,
            {"recipient": LEO, "workshop": WORKSHOP, "former_partner": FIA},
        )

        assert rendered.title == "Your partner cancelled their attendance: Salsa Basics"
        assert "Fia Tester has cancelled" in rendered.message
        assert "waiting list" in rendered.message

    def test_partner_withdrew_without_name(self):
        """Test a former partner without a profile is still addressed."""
        unnamed = {**FIA, "name": "", "surname": "", "email": "", "full_name": ""}

        rendered = render(
            EventTypes.Pairing.PARTNER_WITHDREW,
            {"recipient": LEO, "workshop": WORKSHOP, "former_partner": unnamed},
        )

        assert "Your partner has cancelled their attendance" in rendered.message

    def test_partner_reassigned(self):
        rendered = render(
            EventTypes.Pairing.PARTNER_REASSIGNED,
            {
                "recipient": LEO,
                "workshop": WORKSHOP,
                "former_partner": FIA,
                "new_partner": FLOR,
            },
        )

        assert rendered.title.startswith("Your partner cancelled and you have a new partner")
        assert "Your new partner is Flor Tester." in rendered.message

    def test_workshop_changed(self):
        rendered = render(
            EventTypes.Workshop.CHANGED,
            {
                "recipient": LEO,
                "workshop": WORKSHOP,
                "deltas": [{"description": "Location changed: Main Hall"}],
                "cancelled": False,
            },
            date_format="%Y/%m/%d",
        )

        assert rendered.title == "Changes to the workshop: Salsa Basics"
        assert "- Location changed: Main Hall" in rendered.message
        assert "Salsa Basics with Sara, Tomas" in rendered.message
        assert "Date: 2030/05/17" in rendered.message

    def test_workshop_cancelled(self):
        rendered = render(
            EventTypes.Workshop.CHANGED,
            {
                "recipient": LEO,
                "workshop": WORKSHOP,
                "deltas": [{"description": "Workshop cancelled: Salsa Basics"}],
                "cancelled": True,
            },
        )

        assert rendered.title == "Workshop cancelled: Salsa Basics"
        assert "Updated workshop details" not in rendered.message

    def test_unknown_event(self):
        assert render("pairing.unknown", {}) is None


class TestPairingNotificationService:
    """Tests for PairingNotificationService."""

    def test_default_channels(self, settings):
        """Test email is the default channel."""
        service = PairingNotificationService(settings)

        assert [c.channel_type for c in service.channels] == [ChannelType.EMAIL]

    def test_build_payload(self, notifications):
        """Test payloads are addressed to the event recipient."""
        event = EventData(
            event_type=EventTypes.Pairing.PARTNER_ASSIGNED,
            payload={"recipient": LEO, "workshop": WORKSHOP, "partner": FIA},
            workshop_id=1,
        )

        payload = notifications.build_payload(event)

        assert payload.recipient_email == "leo@example.com"
        assert payload.recipient_name == "Leo"
        assert payload.action_url == "https://dance.example.com/profile"
        assert payload.data == {"event_id": event.event_id, "workshop_id": 1, "record_id": 1}

    @pytest.mark.asyncio
    async def test_unknown_event_sends_nothing(self, notifications, channel):
        results = await notifications.handle_event(EventData(event_type="other.event", payload={}))

        assert results == []
        assert channel.sent == []

    @pytest.mark.asyncio
    async def test_channel_exception_becomes_failure(self, settings):
        """Test a raising channel is reported instead of propagating."""
        service = PairingNotificationService(
            settings, channels=[RecordingChannel(error=RuntimeError("smtp down"))]
        )
        event = EventData(
            event_type=EventTypes.Pairing.PARTNER_WITHDREW,
            payload={"recipient": LEO, "workshop": WORKSHOP, "former_partner": FIA},
        )

        (result,) = await service.handle_event(event)

        assert result.status == DeliveryStatus.FAILED
        assert result.error_message == "smtp down"

    @pytest.mark.asyncio
    async def test_register_and_unregister(self, notifications, channel):
        bus = EventBus()
        notifications.register(bus)
        await bus.publish(
            EventTypes.Pairing.PARTNER_ASSIGNED,
            {"recipient": LEO, "workshop": WORKSHOP, "partner": FIA},
        )
        notifications.unregister(bus)
        await bus.publish(
            EventTypes.Pairing.PARTNER_ASSIGNED,
            {"recipient": LEO, "workshop": WORKSHOP, "partner": FIA},
        )

        assert len(channel.sent) == 1
        assert bus.get_stats()["total_handlers"] == 0


class TestDeliveryPipeline:
    """Tests for events flowing from the services to the channels."""

    @pytest.mark.asyncio
    async def test_enrollment_notifies_waiting_partner(
        self, store, directory, workshop_id, notifications, channel
    ):
        """Test a match is delivered to the member who was waiting."""
        bus = EventBus()
        notifications.register(bus)
        emitter = EventBusEmitter(bus)
        service = PairingService(store, directory, emitter)

        await service.enroll(1, workshop_id)
        await service.enroll(3, workshop_id)
        await emitter.drain()

        (payload,) = channel.sent
        assert payload.recipient_email == "leo@example.com"
        assert payload.title == "Partner for the workshop: Salsa Basics"
        assert "Fia Tester" in payload.message

    @pytest.mark.asyncio
    async def test_cancellation_reaches_every_member(
        self, store, directory, workshop_id, notifications, channel
    ):
        """Test each member receives the cancellation notice."""
        bus = EventBus()
        notifications.register(bus)
        emitter = EventBusEmitter(bus)
        service = PairingService(store, directory, emitter)
        await service.enroll(1, workshop_id)
        await service.enroll(2, workshop_id)
        await emitter.drain()
        channel.sent.clear()

        await WorkshopChangeService(store, directory, emitter).on_workshop_cancelled(workshop_id)
        await emitter.drain()

        assert sorted(p.recipient_email for p in channel.sent) == [
            "leo@example.com",
            "luis@example.com",
        ]
        assert all(p.title == "Workshop cancelled: Salsa Basics" for p in channel.sent)

    @pytest.mark.slow
    @pytest.mark.asyncio
    async def test_slow_channel_does_not_delay_enrollment(
        self, store, directory, workshop_id, settings
    ):
        """Test enroll returns while a slow delivery is still running."""
        channel = SlowChannel(delay=1.0, error=RuntimeError("smtp timed out"))
        notifications = PairingNotificationService(settings, channels=[channel])
        bus = EventBus()
        notifications.register(bus)
        emitter = EventBusEmitter(bus)
        service = PairingService(store, directory, emitter)
        await service.enroll(1, workshop_id)

        started = time.monotonic()
        record = await service.enroll(3, workshop_id)
        elapsed = time.monotonic() - started

        assert record.status == PairingStatus.CONFIRMED
        assert elapsed < 0.5
        assert emitter.pending == 1

        await emitter.drain()

        assert emitter.pending == 0
        assert channel.attempts == 1
