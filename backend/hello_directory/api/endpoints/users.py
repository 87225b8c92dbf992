"""
User API endpoints

CRUD over the user directory. JSON bodies use camelCase field names;
snake_case is accepted on input.
"""

from datetime import datetime
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...constants import DEFAULT_PAGE_SIZE
from ...domain.users.domain_services import UserDirectory
from ...domain.users.entities import UserRecord
from ..dependencies import get_user_directory

logger = structlog.get_logger()
router = APIRouter(prefix="/user", tags=["users"])


class UserBase(BaseModel):
    """Fields a client may send."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    username: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)
    active: Optional[bool] = None

    def to_record(self) -> UserRecord:
        return UserRecord(**self.model_dump())


class UserCreate(UserBase):
    """Schema for creating users."""


class UserUpdate(UserBase):
    """Schema for merge-patching users; null fields are left unchanged."""


class UserRead(UserBase):
    """Schema for reading users."""

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def to_read(record: UserRecord) -> UserRead:
    return UserRead.model_validate(record.to_dict())


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate, directory: UserDirectory = Depends(get_user_directory)
) -> UserRead:
    """Create a user; 400 if the username or email is taken."""
    record = await directory.create(payload.to_record())
    return to_read(record)


@router.get("", response_model=List[UserRead])
async def list_users(
    page: Optional[str] = Query(None, description="Zero-based page number"),
    size: Optional[str] = Query(None, description="Page size"),
    directory: UserDirectory = Depends(get_user_directory),
) -> List[UserRead]:
    """List one page of users; malformed paging parameters answer 400."""
    records = await directory.list(
        0 if page is None else page,
        DEFAULT_PAGE_SIZE if size is None else size,
    )
    return [to_read(record) for record in records]


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: str, directory: UserDirectory = Depends(get_user_directory)
) -> UserRead:
    return to_read(await directory.get(user_id))


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    directory: UserDirectory = Depends(get_user_directory),
) -> UserRead:
    """Merge-patch a user."""
    record = await directory.update(user_id, payload.to_record())
    return to_read(record)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str, directory: UserDirectory = Depends(get_user_directory)
) -> Response:
    await directory.delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
