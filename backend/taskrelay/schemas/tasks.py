"""Schemas for task create/update/read API operations."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal
from uuid import UUID

from pydantic import Field, field_validator
from sqlmodel import SQLModel

TaskPriority = Literal["Low", "Medium", "High", "Urgent"]
TaskStatus = Literal["ToDo", "InProgress", "Review", "Completed"]
TITLE_MAX_LENGTH = 100
RUNTIME_ANNOTATION_TYPES = (datetime, UUID)

# Fields a patch may omit but never clear.
NON_NULLABLE_UPDATE_FIELDS = ("title", "due_date", "priority", "status")


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


class TaskCreate(SQLModel):
    """Payload for creating a task; the creator is always the caller."""

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    due_date: datetime
    priority: TaskPriority
    status: TaskStatus = "ToDo"
    assigned_to_id: UUID | None = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime) -> datetime:
        """Store due dates as naive UTC."""
        return _naive_utc(value)


class TaskUpdate(SQLModel):
    """Payload for partial task updates.

    Omitted fields are left untouched. `description` and `assigned_to_id`
    may be cleared with an explicit null; the other fields may not.
    `expected_version`, when sent, must match the stored version.
    """

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    due_date: datetime | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    assigned_to_id: UUID | None = None
    expected_version: int | None = Field(default=None, ge=1)

    @field_validator(*NON_NULLABLE_UPDATE_FIELDS, mode="before")
    @classmethod
    def reject_explicit_null(cls, value: object) -> object:
        if value is None:
            raise ValueError("field may be omitted but not set to null")
        return value

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime | None) -> datetime | None:
        """Store due dates as naive UTC."""
        if value is None:
            return None
        return _naive_utc(value)

    def changes(self) -> dict[str, object]:
        """Return only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True, exclude={"expected_version"})


class TaskRead(SQLModel):
    """Task payload returned by read endpoints and live notifications."""

    id: UUID
    title: str
    description: str | None = None
    due_date: datetime
    priority: str
    status: str
    creator_id: UUID
    assigned_to_id: UUID | None = None
    version: int
    created_at: datetime
    updated_at: datetime


class TaskDeleteResponse(SQLModel):
    """Response returned after a task is permanently removed."""

    message: str = "Task deleted successfully"
    task: TaskRead
