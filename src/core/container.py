# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Service wiring for the workshop pairing service.

Builds the pairing and workshop services on top of the SQL store, the
event bus and the notification service. Call ``start_services`` at
application startup and ``stop_services`` at shutdown.

Example:
    services = await start_services(get_settings())
    record = await services.pairing.enroll(user_id=4, workshop_id=1)
    await stop_services(services)
"""

import logging
from dataclasses import dataclass

from src.core.config.settings import Settings
from src.domains.pairing import PairingService
from src.domains.workshop import WorkshopChangeService
from src.infrastructure.database import (
    SqlEnrollmentStore,
    SqlUserDirectory,
    close_database,
    create_schema,
    get_engine,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.events import EventBus, EventBusEmitter, get_event_bus
from src.infrastructure.notifications import PairingNotificationService
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Fully wired application services."""

    pairing: PairingService
    workshops: WorkshopChangeService
    notifications: PairingNotificationService
    event_bus: EventBus
    emitter: EventBusEmitter


async def start_services(settings: Settings) -> ServiceContainer:
    """Initialize infrastructure and build the services.

    Development SQLite databases get their tables created directly;
    every other database is expected to be migrated with Alembic.

    Args:
        settings: Application settings.

    Returns:
        The wired services.
    """
    setup_logging(settings)
    await init_database(settings)
    if settings.is_development and settings.database.is_sqlite:
        await create_schema(get_engine())

    sessionmaker = get_sessionmaker()
    store = SqlEnrollmentStore(sessionmaker, settings.pairing.lock_timeout_seconds)
    directory = SqlUserDirectory(sessionmaker)

    event_bus = get_event_bus()
    notifications = PairingNotificationService(settings.notifications)
    notifications.register(event_bus)
    emitter = EventBusEmitter(event_bus)

    logger.info(
        "Workshop pairing services started (environment=%s, email=%s)",
        settings.environment,
        "on" if settings.notifications.email_enabled else "off",
    )
    return ServiceContainer(
        pairing=PairingService(store, directory, emitter),
        workshops=WorkshopChangeService(
            store,
            directory,
            emitter,
            date_format=settings.notifications.date_format,
        ),
        notifications=notifications,
        event_bus=event_bus,
        emitter=emitter,
    )


async def stop_services(services: ServiceContainer) -> None:
    """Finish pending deliveries, detach handlers and close the database pool."""
    await services.emitter.drain()
    services.notifications.unregister(services.event_bus)
    await close_database()
    logger.info("Workshop pairing services stopped")
