"""
Pytest configuration and shared fixtures for MONGO_RECORDS tests.

This module provides:
- Mock Motor client, session and collection fixtures
- A configured Connection backed by the mock client
- Testcontainers fixtures for integration tests against a real MongoDB
"""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from motor.motor_asyncio import AsyncIOMotorCollection

from mongo_records.database.connection import Connection
from mongo_records.observability import get_metrics_collector


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: tests that need a running MongoDB (testcontainers)"
    )


# ============================================================================
# MOCK MOTOR FIXTURES
# ============================================================================


def _make_cursor(docs: list | None = None) -> MagicMock:
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(docs or []))
    return cursor


@pytest.fixture
def make_cursor():
    """Factory for cursor mocks whose chaining methods return the cursor itself."""
    return _make_cursor


@pytest.fixture
def mock_mongo_collection() -> MagicMock:
    """Create a mock MongoDB collection."""
    collection = MagicMock(spec=AsyncIOMotorCollection)
    collection.name = "MongoTest"
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id="test_id"))
    collection.find_one = AsyncMock(return_value=None)
    collection.find = MagicMock(return_value=_make_cursor())
    collection.replace_one = AsyncMock(return_value=MagicMock(matched_count=1, modified_count=1))
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.count_documents = AsyncMock(return_value=0)
    return collection


@pytest.fixture
def mock_mongo_session() -> MagicMock:
    """Create a mock client session usable as an async context manager."""
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return session


@pytest.fixture
def mock_mongo_client(mock_mongo_collection, mock_mongo_session) -> MagicMock:
    """Create a mock Motor client whose every collection is mock_mongo_collection."""
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    client.start_session = AsyncMock(return_value=mock_mongo_session)

    db = MagicMock()
    db.__getitem__.return_value = mock_mongo_collection
    client.__getitem__.return_value = db
    return client


@pytest_asyncio.fixture
async def connection(mock_mongo_client) -> AsyncGenerator[Connection, None]:
    """A Connection configured against the mock client."""
    conn = Connection()
    with patch(
        "mongo_records.database.connection.AsyncIOMotorClient",
        return_value=mock_mongo_client,
    ):
        await conn.configure("localhost", "test_db")
    yield conn
    await conn.close()


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test with an empty metrics collector."""
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove connection settings from the environment."""
    for var in (
        "MONGO_URI",
        "DB_NAME",
        "MONGO_MAX_POOL_SIZE",
        "MONGO_MIN_POOL_SIZE",
        "MONGO_SERVER_SELECTION_TIMEOUT_MS",
    ):
        monkeypatch.delenv(var, raising=False)
    yield


# ============================================================================
# TESTCONTAINERS FIXTURES (Real MongoDB for Integration Tests)
# ============================================================================


@pytest.fixture(scope="session")
def mongodb_container():
    """
    Start a MongoDB container for integration tests.

    Session-scoped: the container starts once and is reused. Tests are
    skipped when testcontainers or Docker is unavailable.
    """
    try:
        from testcontainers.mongodb import MongoDbContainer
    except ImportError:
        pytest.skip("testcontainers not installed. Install with: pip install -e '.[test]'")

    container = MongoDbContainer(image="mongo:7")
    try:
        container.start()
    except Exception as e:  # docker missing or not running
        pytest.skip(f"Could not start MongoDB container: {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture
def mongodb_connection_string(mongodb_container) -> str:
    """Connection string for the test container."""
    return mongodb_container.get_connection_url()


@pytest_asyncio.fixture
async def real_connection(mongodb_connection_string) -> AsyncGenerator[Connection, None]:
    """
    A Connection to the test container using a fresh database.

    The database is dropped after the test.
    """
    import os
    import uuid

    db_name = f"test_db_{os.getpid()}_{uuid.uuid4().hex[:8]}"
    conn = Connection()
    await conn.configure(mongodb_connection_string, db_name)

    yield conn

    client = await conn.get_client()
    await client.drop_database(db_name)
    await conn.close()
