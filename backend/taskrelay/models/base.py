"""Base model class exposing the `objects` query manager."""

from __future__ import annotations

from typing import ClassVar

from sqlmodel import SQLModel

from taskrelay.db.query_manager import ManagerDescriptor


class QueryModel(SQLModel):
    """SQLModel base with `Model.objects` query helpers."""

    objects: ClassVar[ManagerDescriptor] = ManagerDescriptor()
