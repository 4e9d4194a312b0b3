"""Structured error payload schemas used by API responses."""

from __future__ import annotations

from pydantic import Field
from sqlmodel import SQLModel


class ErrorResponse(SQLModel):
    """Standard JSON error envelope produced by the error-handling layer."""

    detail: str | dict[str, object] | list[object] = Field(
        description="Human-readable message or structured validation errors.",
        examples=["Task not found", "Unauthorized to update this task"],
    )
    request_id: str | None = Field(
        default=None,
        description="Request correlation identifier injected by middleware.",
    )
