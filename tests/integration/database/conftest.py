# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for database integration tests.

Provides a SQLite database file per test with the schema created from
the models. Set TEST_DATABASE_URL to run against another backend.
"""

import datetime as dt
import os

import pytest
import pytest_asyncio

from src.core.config import DatabaseSettings
from src.infrastructure.database import (
    SqlEnrollmentStore,
    SqlUserDirectory,
    create_engine,
    create_schema,
    create_sessionmaker,
)
from src.infrastructure.database.models import Base, User, Workshop


@pytest.fixture
def db_url(tmp_path) -> str:
    """Get the database URL for tests."""
    return os.environ.get("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")


@pytest_asyncio.fixture(scope="function")
async def db_engine(db_url: str):
    """Create async engine with a fresh schema."""
    engine = create_engine(DatabaseSettings(url=db_url))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await create_schema(engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db_sessionmaker(db_engine):
    return create_sessionmaker(db_engine)


@pytest_asyncio.fixture(scope="function")
async def seeded(db_sessionmaker):
    """Insert two leaders, two followers and one upcoming workshop."""
    async with db_sessionmaker() as session:
        async with session.begin():
            session.add_all(
                [
                    User(id=1, name="Leo", surname="Tester", email="leo@example.com", dance_role="Leader"),
                    User(id=2, name="Luis", surname="Tester", email="luis@example.com", dance_role="lead"),
                    User(id=3, name="Fia", surname="Tester", email="fia@example.com", dance_role="Follower"),
                    User(id=4, name="Flor", surname="Tester", email="Flor@Example.com", dance_role="follower"),
                    Workshop(
                        id=1,
                        name="Salsa Basics",
                        modality="Salsa",
                        instructors=["Sara"],
                        date=dt.date(2030, 5, 17),
                        time=dt.time(20, 30),
                        location="Main Hall",
                    ),
                ]
            )


@pytest.fixture
def sql_store(db_sessionmaker, seeded) -> SqlEnrollmentStore:
    return SqlEnrollmentStore(db_sessionmaker, lock_timeout=5.0)


@pytest.fixture
def sql_directory(db_sessionmaker, seeded) -> SqlUserDirectory:
    return SqlUserDirectory(db_sessionmaker)
