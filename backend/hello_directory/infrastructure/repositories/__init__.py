"""
Repository Implementations

Concrete cache stores and user storages.
"""

from .cache_repository import InMemoryCacheStore, RedisCacheStore
from .user_repository import InMemoryUserStorage, SqlAlchemyUserStorage

__all__ = [
    "RedisCacheStore",
    "InMemoryCacheStore",
    "SqlAlchemyUserStorage",
    "InMemoryUserStorage",
]
