# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests against the in-memory store
- Integration tests against a SQLite database file
"""

from collections.abc import Iterator

import pytest

from src.core.config import clear_settings_cache
from src.domains.pairing import PairingService
from src.infrastructure.events import reset_event_bus
from src.models.common import DanceRole
from tests.fakes import FakeUserDirectory, InMemoryEnrollmentStore, RecordingEmitter

WORKSHOP_ID = 1


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (uses a database file)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_singletons() -> Iterator[None]:
    """Reset cached settings and the event bus around every test."""
    clear_settings_cache()
    reset_event_bus()
    yield
    clear_settings_cache()
    reset_event_bus()


# =============================================================================
# Pairing Fixtures
# =============================================================================


@pytest.fixture
def workshop_id() -> int:
    """Provide the id of the default workshop."""
    return WORKSHOP_ID


@pytest.fixture
def store(workshop_id: int) -> InMemoryEnrollmentStore:
    """Provide an in-memory store holding one upcoming workshop."""
    store = InMemoryEnrollmentStore()
    store.add_workshop(workshop_id)
    return store


@pytest.fixture
def directory() -> FakeUserDirectory:
    """Provide a directory with two leaders and two followers.

    Users 1 and 2 are leaders (Leo, Luis); users 3 and 4 are
    followers (Fia, Flor).
    """
    directory = FakeUserDirectory()
    directory.add(1, "Leo", DanceRole.LEADER)
    directory.add(2, "Luis", DanceRole.LEADER)
    directory.add(3, "Fia", DanceRole.FOLLOWER)
    directory.add(4, "Flor", DanceRole.FOLLOWER)
    return directory


@pytest.fixture
def emitter() -> RecordingEmitter:
    """Provide an emitter recording published events."""
    return RecordingEmitter()


@pytest.fixture
def service(
    store: InMemoryEnrollmentStore,
    directory: FakeUserDirectory,
    emitter: RecordingEmitter,
) -> PairingService:
    """Provide a pairing service over the in-memory collaborators."""
    return PairingService(store, directory, emitter)
