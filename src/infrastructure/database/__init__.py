# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the enrollment store.

Example:
    from src.infrastructure.database import (
        SqlEnrollmentStore,
        SqlUserDirectory,
        get_sessionmaker,
        init_database,
    )

    await init_database(settings)
    store = SqlEnrollmentStore(get_sessionmaker(), settings.pairing.lock_timeout_seconds)
    directory = SqlUserDirectory(get_sessionmaker())
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    create_engine,
    create_schema,
    create_sessionmaker,
    get_engine,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.database.locks import WorkshopLockRegistry
from src.infrastructure.database.stores import (
    SqlEnrollmentStore,
    SqlEnrollmentTransaction,
    SqlUserDirectory,
)

__all__ = [
    # Connection
    "DatabaseError",
    "check_database_connection",
    "close_database",
    "create_engine",
    "create_schema",
    "create_sessionmaker",
    "get_engine",
    "get_sessionmaker",
    "init_database",
    # Stores
    "SqlEnrollmentStore",
    "SqlEnrollmentTransaction",
    "SqlUserDirectory",
    "WorkshopLockRegistry",
]
