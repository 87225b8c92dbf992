"""
User Domain Services

Directory of users enforcing natural-key uniqueness and merge-patch updates.
"""

from typing import Any, List

import structlog
from opentelemetry import trace

from ...constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..exceptions import ConflictError, NotFoundError, ValidationError
from .entities import UserRecord
from .repository_interfaces import UserStorage

logger = structlog.get_logger()
tracer = trace.get_tracer(__name__)


def parse_integer(value: Any, field: str, label: str) -> int:
    """Coerce an incoming integer parameter or raise ``ValidationError``."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"{label} must be an integer", field=field, value=value)


def parse_user_id(value: Any) -> int:
    """Coerce an incoming id to ``int`` or raise ``ValidationError``."""
    return parse_integer(value, "id", "user id")


class UserDirectory:
    """
    CRUD over user records with uniqueness and merge-patch rules.

    Uniqueness pre-checks are check-then-act with no lock. The storage
    layer's unique constraint is the final arbiter; a violation it reports
    at write time surfaces as ``ConflictError`` just like a pre-check hit.
    """

    def __init__(self, storage: UserStorage):
        self.storage = storage

    async def create(self, candidate: UserRecord) -> UserRecord:
        """
        Create a user.

        Args:
            candidate: Record to persist; any supplied id is ignored

        Returns:
            The persisted record with its assigned id and timestamps

        Raises:
            ConflictError: If the username or email is already held
        """
        with tracer.start_as_current_span("user_directory.create"):
            if candidate.username is not None and await self.storage.exists_by_username(
                candidate.username
            ):
                raise self._conflict("username", candidate.username)
            if candidate.email is not None and await self.storage.exists_by_email(
                candidate.email
            ):
                raise self._conflict("email", candidate.email)

            saved = await self.storage.save(
                candidate.copy(id=None, created_at=None, updated_at=None)
            )
            logger.info("User created", user_id=saved.id, username=saved.username)
            return saved

    async def get(self, user_id: Any) -> UserRecord:
        """Fetch a user by id or raise ``NotFoundError``."""
        user_id = parse_user_id(user_id)
        with tracer.start_as_current_span("user_directory.get") as span:
            span.set_attribute("user.id", user_id)
            record = await self.storage.get_by_id(user_id)
            if record is None:
                raise self._not_found(user_id)
            return record

    async def list(
        self, page: Any = 0, page_size: Any = DEFAULT_PAGE_SIZE
    ) -> List[UserRecord]:
        """Return one zero-based page of users in storage order."""
        page = parse_integer(page, "page", "page")
        page_size = parse_integer(page_size, "size", "page size")
        if page < 0:
            raise ValidationError("page must be non-negative", field="page", value=page)
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise ValidationError(
                f"page size must be between 1 and {MAX_PAGE_SIZE}",
                field="size",
                value=page_size,
            )
        with tracer.start_as_current_span("user_directory.list"):
            return await self.storage.find_all(page, page_size)

    async def update(self, user_id: Any, patch: UserRecord) -> UserRecord:
        """
        Merge-patch a user.

        Only non-null fields of ``patch`` overwrite stored values; null
        fields never clear anything. A changed username or email is checked
        for uniqueness before it is applied.

        Raises:
            NotFoundError: If the id does not exist
            ConflictError: If a changed username or email is already held
        """
        user_id = parse_user_id(user_id)
        with tracer.start_as_current_span("user_directory.update") as span:
            span.set_attribute("user.id", user_id)
            existing = await self.storage.get_by_id(user_id)
            if existing is None:
                raise self._not_found(user_id)

            merged = existing.merge(patch)

            if patch.username is not None and patch.username != existing.username:
                if await self.storage.find_by_username(patch.username) is not None:
                    raise self._conflict("username", patch.username)
                merged.username = patch.username

            if patch.email is not None and patch.email != existing.email:
                if await self.storage.find_by_email(patch.email) is not None:
                    raise self._conflict("email", patch.email)
                merged.email = patch.email

            saved = await self.storage.save(merged)
            logger.info("User updated", user_id=user_id)
            return saved

    async def delete(self, user_id: Any) -> None:
        """Delete a user or raise ``NotFoundError``."""
        user_id = parse_user_id(user_id)
        with tracer.start_as_current_span("user_directory.delete") as span:
            span.set_attribute("user.id", user_id)
            if not await self.storage.exists_by_id(user_id):
                raise self._not_found(user_id)
            await self.storage.delete_by_id(user_id)
            logger.info("User deleted", user_id=user_id)

    @staticmethod
    def _not_found(user_id: int) -> NotFoundError:
        logger.info("User not found", user_id=user_id)
        return NotFoundError(user_id=user_id)

    @staticmethod
    def _conflict(field: str, value: str) -> ConflictError:
        logger.info("User natural key already taken", field=field, value=value)
        return ConflictError.for_field(field)
