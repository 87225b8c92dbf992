"""
User Repository Implementations

``UserStorage`` backends:

- ``SqlAlchemyUserStorage``: relational store, unique constraints enforced
  by the database and translated to ``ConflictError``.
- ``InMemoryUserStorage``: dict-backed store with the same uniqueness
  guarantees, for local runs and tests.
"""

from typing import AsyncContextManager, Callable, Dict, List, Optional

import structlog
from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from ...constants import get_current_timestamp
from ...domain.exceptions import BackendUnavailable, ConflictError, NotFoundError
from ...domain.users.entities import UserRecord
from ...domain.users.repository_interfaces import UserStorage
from ...models import User

logger = structlog.get_logger()

SessionScope = Callable[[], AsyncContextManager[AsyncSession]]

_NATURAL_KEYS = ("username", "email")


def to_record(user: User) -> UserRecord:
    """Map an ORM row to a detached domain record."""
    return UserRecord(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        active=user.active,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def violated_field(error: IntegrityError) -> Optional[str]:
    """
    Name the natural key behind a unique violation, if recognisable.

    Matches both the constraint names (``uq_users_username``) reported by
    PostgreSQL and the column references (``users.username``) reported by
    SQLite.
    """
    message = str(error.orig if error.orig is not None else error).lower()
    for field in _NATURAL_KEYS:
        if f"uq_users_{field}" in message or f"users.{field}" in message:
            return field
    return None


class SqlAlchemyUserStorage(UserStorage):
    """
    SQLAlchemy implementation of user storage.

    Each call runs in its own session and transaction obtained from
    ``session_scope``; records handed out are detached copies.
    """

    def __init__(self, session_scope: SessionScope):
        self.session_scope = session_scope

    async def get_by_id(self, user_id: int) -> Optional[UserRecord]:
        try:
            async with self.session_scope() as session:
                user = await session.get(User, user_id)
                return to_record(user) if user is not None else None
        except (OperationalError, InterfaceError) as e:
            raise self._unavailable("get_by_id", e)

    async def exists_by_id(self, user_id: int) -> bool:
        return await self._exists(User.id == user_id)

    async def exists_by_username(self, username: str) -> bool:
        return await self._exists(User.username == username)

    async def exists_by_email(self, email: str) -> bool:
        return await self._exists(User.email == email)

    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        return await self._find_one(User.username == username)

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        return await self._find_one(User.email == email)

    async def find_all(self, page: int, page_size: int) -> List[UserRecord]:
        stmt = select(User).order_by(User.id).offset(page * page_size).limit(page_size)
        try:
            async with self.session_scope() as session:
                result = await session.execute(stmt)
                return [to_record(user) for user in result.scalars().all()]
        except (OperationalError, InterfaceError) as e:
            raise self._unavailable("find_all", e)

    async def save(self, record: UserRecord) -> UserRecord:
        """
        Insert or update a record.

        Raises:
            ConflictError: If the database rejects a duplicate username or email
            NotFoundError: If an update targets a row that no longer exists
            BackendUnavailable: If the database cannot be reached
        """
        try:
            async with self.session_scope() as session:
                if record.id is None:
                    user = User(
                        username=record.username,
                        email=record.email,
                        first_name=record.first_name,
                        last_name=record.last_name,
                        active=record.active,
                    )
                    session.add(user)
                else:
                    user = await session.get(User, record.id)
                    if user is None:
                        raise NotFoundError(user_id=record.id)
                    user.username = record.username
                    user.email = record.email
                    user.first_name = record.first_name
                    user.last_name = record.last_name
                    user.active = record.active

                await session.flush()
                await session.refresh(user)
                saved = to_record(user)
        except IntegrityError as e:
            field = violated_field(e) or await self._held_natural_key(record)
            if field is None:
                logger.error(
                    "Repository: Unrecognised integrity error",
                    user_id=record.id,
                    error=str(e),
                )
                raise
            logger.info(
                "Repository: Unique constraint rejected write",
                field=field,
                user_id=record.id,
            )
            raise ConflictError.for_field(field) from e
        except (OperationalError, InterfaceError) as e:
            raise self._unavailable("save", e)

        logger.debug("Repository: User saved", user_id=saved.id)
        return saved

    async def delete_by_id(self, user_id: int) -> None:
        try:
            async with self.session_scope() as session:
                await session.execute(delete(User).where(User.id == user_id))
        except (OperationalError, InterfaceError) as e:
            raise self._unavailable("delete_by_id", e)
        logger.debug("Repository: User deleted", user_id=user_id)

    async def _exists(self, criterion) -> bool:
        try:
            async with self.session_scope() as session:
                result = await session.execute(select(exists().where(criterion)))
                return bool(result.scalar())
        except (OperationalError, InterfaceError) as e:
            raise self._unavailable("exists", e)

    async def _find_one(self, criterion) -> Optional[UserRecord]:
        try:
            async with self.session_scope() as session:
                result = await session.execute(select(User).where(criterion).limit(1))
                user = result.scalar_one_or_none()
                return to_record(user) if user is not None else None
        except (OperationalError, InterfaceError) as e:
            raise self._unavailable("find", e)

    async def _held_natural_key(self, record: UserRecord) -> Optional[str]:
        """Find which natural key of ``record`` another row already holds."""
        if record.username is not None:
            holder = await self.find_by_username(record.username)
            if holder is not None and holder.id != record.id:
                return "username"
        if record.email is not None:
            holder = await self.find_by_email(record.email)
            if holder is not None and holder.id != record.id:
                return "email"
        return None

    @staticmethod
    def _unavailable(operation: str, error: Exception) -> BackendUnavailable:
        logger.error(
            "Repository: Database unreachable",
            operation=operation,
            error=str(error),
            exc_info=True,
        )
        return BackendUnavailable(
            f"Storage {operation} failed: {error}",
            backend="storage",
            original_error=error,
            error_code="STORAGE_UNAVAILABLE",
        )


class InMemoryUserStorage(UserStorage):
    """
    Dict-backed user storage.

    Ids are assigned from a counter starting at 1. ``save`` checks both
    natural keys against every other record and raises ``ConflictError``
    on a clash, so it behaves like a unique constraint. Records are copied
    in and out.
    """

    def __init__(self):
        self._records: Dict[int, UserRecord] = {}
        self._next_id = 1

    async def get_by_id(self, user_id: int) -> Optional[UserRecord]:
        record = self._records.get(user_id)
        return record.copy() if record is not None else None

    async def exists_by_id(self, user_id: int) -> bool:
        return user_id in self._records

    async def exists_by_username(self, username: str) -> bool:
        return await self.find_by_username(username) is not None

    async def exists_by_email(self, email: str) -> bool:
        return await self.find_by_email(email) is not None

    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        for record in self._records.values():
            if record.username == username:
                return record.copy()
        return None

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        for record in self._records.values():
            if record.email == email:
                return record.copy()
        return None

    async def find_all(self, page: int, page_size: int) -> List[UserRecord]:
        ordered = [self._records[k] for k in sorted(self._records)]
        start = page * page_size
        return [record.copy() for record in ordered[start : start + page_size]]

    async def save(self, record: UserRecord) -> UserRecord:
        # No await between the uniqueness scan and the write
        for other in self._records.values():
            if other.id == record.id:
                continue
            for field in _NATURAL_KEYS:
                value = getattr(record, field)
                if value is not None and getattr(other, field) == value:
                    raise ConflictError.for_field(field)

        now = get_current_timestamp()
        if record.id is None:
            stored = record.copy(id=self._next_id, created_at=now, updated_at=now)
            self._next_id += 1
        else:
            existing = self._records.get(record.id)
            if existing is None:
                raise NotFoundError(user_id=record.id)
            stored = record.copy(created_at=existing.created_at, updated_at=now)

        self._records[stored.id] = stored
        return stored.copy()

    async def delete_by_id(self, user_id: int) -> None:
        self._records.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._records)
