"""User and auth API schemas for register, login, profile, and directory reads."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, field_validator
from sqlmodel import SQLModel

NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
RUNTIME_ANNOTATION_TYPES = (datetime, UUID, EmailStr)


def _normalize_email(value: object) -> object:
    # Addresses are stored and compared lower-cased.
    if isinstance(value, str):
        return value.strip().lower()
    return value


class UserCreate(SQLModel):
    """Registration payload."""

    name: str = Field(
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        description="Full display name.",
        examples=["Alex Chen"],
    )
    email: EmailStr = Field(
        description="Login email address; unique across users.",
        examples=["alex@example.com"],
    )
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        return _normalize_email(value)


class UserLogin(SQLModel):
    """Login payload."""

    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        return _normalize_email(value)


class UserUpdate(SQLModel):
    """Payload for partial profile updates."""

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    email: EmailStr | None = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        return _normalize_email(value)


class UserRead(SQLModel):
    """Public user payload; never includes credentials."""

    id: UUID = Field(
        description="Internal user UUID.",
        examples=["11111111-1111-1111-1111-111111111111"],
    )
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


class UserDirectoryEntry(SQLModel):
    """Minimal user reference used by assignee pickers."""

    id: UUID
    name: str
    email: str


class AuthResponse(SQLModel):
    """Successful register/login response."""

    user: UserRead
    token: str = Field(description="Bearer token for the `Authorization` header.")
