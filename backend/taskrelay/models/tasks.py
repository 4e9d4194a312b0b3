"""Task model representing tracked work items and their ownership."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from taskrelay.core.time import utcnow
from taskrelay.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class Task(QueryModel, table=True):
    """Task entity with creator/assignee ownership and a write version token."""

    __tablename__ = "tasks"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    title: str
    description: str | None = None
    due_date: datetime
    priority: str = Field(default="Medium", index=True)
    status: str = Field(default="ToDo", index=True)

    creator_id: UUID = Field(foreign_key="users.id", index=True)
    assigned_to_id: UUID | None = Field(
        default=None,
        foreign_key="users.id",
        index=True,
    )
    # Incremented on every write; updates and deletes are conditional on it.
    version: int = Field(default=1)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
