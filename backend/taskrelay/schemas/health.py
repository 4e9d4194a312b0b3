"""Health and readiness probe response schemas."""

from __future__ import annotations

from pydantic import Field
from sqlmodel import SQLModel


class HealthStatusResponse(SQLModel):
    """Probe result payload."""

    ok: bool = Field(description="Whether the probe passed.", examples=[True])
