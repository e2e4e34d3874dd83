"""
Shared fixtures.

Storage operations are coroutines; tests drive them with asyncio.run
through the `run` fixture so the suite needs no async plugin.
"""

import asyncio

import pytest

from finance_tracker.config import DatabaseSettings
from finance_tracker.services.storage import Database, InMemoryStorage, SqlStorage


@pytest.fixture
def run():
    """Run a coroutine to completion and return its result."""
    return asyncio.run


@pytest.fixture
def database():
    """A schema-initialised in-memory SQLite database."""
    db = Database(DatabaseSettings(url="sqlite://"))
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def memory_storage():
    return InMemoryStorage()


@pytest.fixture
def sql_storage(database):
    return SqlStorage(database)


@pytest.fixture(params=["memory", "sql"])
def storage(request):
    """Every contract test runs once per backend."""
    return request.getfixturevalue(f"{request.param}_storage")
