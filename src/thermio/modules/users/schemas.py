"""Pydantic schemas for user operations."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from thermio.core.constants import MAX_NAME_LENGTH


class UserCreate(BaseModel):
    """Workspace member profile; credentials are issued by the identity service."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    username: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    email: EmailStr | None = None
    role: Literal["driver", "office", "admin"] = "driver"
    is_temporary: bool = False
    expires_at: datetime | None = None

    @model_validator(mode="after")
    def temporary_needs_expiry(self) -> "UserCreate":
        if self.is_temporary and self.expires_at is None:
            raise ValueError("Temporary users need an expiry")
        return self


class UserResponse(BaseModel):
    id: UUID
    workspace_id: UUID | None
    name: str
    username: str
    email: str | None
    role: str
    is_owner: bool
    is_active: bool
    is_temporary: bool
    expires_at: datetime | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RoleUpdate(BaseModel):
    role: Literal["driver", "office", "admin"]


class OwnershipTransfer(BaseModel):
    new_owner_id: UUID
