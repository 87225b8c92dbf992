"""
Configuration and fixtures for integration tests.

Integration tests run the SQLAlchemy storage on a throwaway SQLite file
and the HTTP API in-process through httpx.
"""

from contextlib import asynccontextmanager

import httpx
import pytest
import structlog
from sqlalchemy.exc import OperationalError

from hello_directory.core.config import Settings
from hello_directory.core.database import DatabaseManager
from hello_directory.core.logging import configure_logging
from hello_directory.infrastructure.repositories.user_repository import (
    SqlAlchemyUserStorage,
)
from hello_directory.main import create_app
from hello_directory.services.container import ServiceContainer

# Configure logging for tests
configure_logging(level="DEBUG", json_logs=False)

logger = structlog.get_logger()


@pytest.fixture
def sqlite_settings(tmp_path):
    """Settings pointing at a per-test SQLite file."""
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'directory.db'}",
        CACHE_BACKEND="local",
    )


@pytest.fixture
async def database(sqlite_settings):
    """Initialized database manager with the schema created."""
    manager = DatabaseManager(sqlite_settings)
    await manager.initialize()
    yield manager
    await manager.close()


@pytest.fixture
def sql_storage(database):
    return SqlAlchemyUserStorage(database.session)


@pytest.fixture
def unreachable_storage():
    """SQLAlchemy storage whose every session fails to connect."""

    @asynccontextmanager
    async def session_scope():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))
        yield

    return SqlAlchemyUserStorage(session_scope)


@pytest.fixture
def container(local_store, user_storage):
    """Container over local backends; nothing to start or stop."""
    return ServiceContainer(cache_store=local_store, user_storage=user_storage)


@pytest.fixture
async def api_client(container):
    """HTTP client bound in-process to an app using the local container."""
    app = create_app(container=container)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
