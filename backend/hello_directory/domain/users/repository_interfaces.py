"""
User Repository Interfaces

Storage contract consumed by the user directory.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .entities import UserRecord


class UserStorage(ABC):
    """
    Abstract storage for user records.

    Lookups report absence with ``None``/``False`` rather than raising.
    ``save`` and ``delete_by_id`` may raise ``ConflictError`` when the
    backing store rejects a duplicate natural key, and ``BackendUnavailable``
    when it cannot be reached.
    """

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[UserRecord]:
        """Find a record by id."""

    @abstractmethod
    async def exists_by_id(self, user_id: int) -> bool:
        """Check if a record with the id exists."""

    @abstractmethod
    async def exists_by_username(self, username: str) -> bool:
        """Check if any record holds the username."""

    @abstractmethod
    async def exists_by_email(self, email: str) -> bool:
        """Check if any record holds the email."""

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        """Find the record holding the username."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        """Find the record holding the email."""

    @abstractmethod
    async def find_all(self, page: int, page_size: int) -> List[UserRecord]:
        """Return one page of records in storage order."""

    @abstractmethod
    async def save(self, record: UserRecord) -> UserRecord:
        """Insert when ``record.id`` is absent, otherwise update by id."""

    @abstractmethod
    async def delete_by_id(self, user_id: int) -> None:
        """Delete the record with the id."""
