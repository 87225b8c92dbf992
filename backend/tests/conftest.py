"""
Main pytest configuration for all backend tests.

Fixtures and configuration for unit and integration tests. Every fixture
uses local backends; no Redis or PostgreSQL server is required.
"""

import os

import pytest

# Set test environment variables before importing app modules
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CACHE_BACKEND"] = "local"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_JSON"] = "false"

from hello_directory.constants import HELLO_CACHE
from hello_directory.domain.cache.domain_services import CachedOperation
from hello_directory.domain.cache.value_objects import CacheConfiguration
from hello_directory.domain.users.domain_services import UserDirectory
from hello_directory.infrastructure.repositories.cache_repository import (
    InMemoryCacheStore,
)
from hello_directory.infrastructure.repositories.user_repository import (
    InMemoryUserStorage,
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Provide a controllable clock for TTL tests."""
    return FakeClock()


@pytest.fixture
def cache_configuration():
    """Namespace table matching the production defaults."""
    return CacheConfiguration.build(600, ttl_overrides={HELLO_CACHE: 10})


@pytest.fixture
def local_store(cache_configuration, clock):
    """In-memory cache store driven by the fake clock."""
    return InMemoryCacheStore(cache_configuration, clock=clock)


@pytest.fixture
def cached_operation(local_store):
    return CachedOperation(local_store)


@pytest.fixture
def user_storage():
    return InMemoryUserStorage()


@pytest.fixture
def directory(user_storage):
    """User directory over in-memory storage."""
    return UserDirectory(user_storage)


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "redis: marks tests as Redis-related")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test file location."""
    for item in items:
        if "redis" in item.nodeid:
            item.add_marker(pytest.mark.redis)
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        elif "unit" in item.nodeid:
            item.add_marker(pytest.mark.unit)
