"""
Test configuration and fixtures.

This module sets up test environment and provides shared fixtures for all tests.
"""

import os
import tempfile
from pathlib import Path

import pytest

# Point DATABASE_URL at a throwaway SQLite file (aiosqlite driver).
# Must be set BEFORE any imports of database.connection or shared.config
_TEST_DB_DIR = tempfile.mkdtemp(prefix="clinic-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_TEST_DB_DIR) / 'test.db'}"
os.environ["LOG_LEVEL"] = "DEBUG"


@pytest.fixture(scope="function")
async def setup_database():
    """
    Create all tables before the test and drop them afterwards.

    Request this fixture (directly or through `session`) in tests that
    touch the database.
    """
    from database.connection import engine
    from database.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def session(setup_database):
    """
    Create a fresh database session for each test.

    Automatically rolls back after each test.
    """
    from database.connection import AsyncSessionLocal

    async with AsyncSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="function", autouse=True)
async def cleanup_engine():
    """
    Dispose the engine after each test.

    Each test runs on its own event loop, so pooled connections must not leak
    from one test into the next.
    """
    yield
    from database.connection import engine
    await engine.dispose()
