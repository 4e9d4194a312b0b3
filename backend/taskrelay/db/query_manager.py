"""Chainable async query helpers used by model managers."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlmodel import SQLModel, select

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement
    from sqlmodel.ext.asyncio.session import AsyncSession

ModelT = TypeVar("ModelT", bound=SQLModel)


@dataclass(frozen=True)
class ModelQuery(Generic[ModelT]):
    """Immutable select builder bound to one model class."""

    model: type[ModelT]
    clauses: tuple[ColumnElement[bool], ...] = field(default_factory=tuple)
    ordering: tuple[Any, ...] = field(default_factory=tuple)

    def filter(self, *clauses: ColumnElement[bool]) -> ModelQuery[ModelT]:
        return replace(self, clauses=(*self.clauses, *clauses))

    def filter_by(self, **kwargs: object) -> ModelQuery[ModelT]:
        clauses = tuple(getattr(self.model, key) == value for key, value in kwargs.items())
        return replace(self, clauses=(*self.clauses, *clauses))

    def order_by(self, *ordering: Any) -> ModelQuery[ModelT]:
        return replace(self, ordering=(*self.ordering, *ordering))

    def statement(self) -> Any:
        statement = select(self.model)
        if self.clauses:
            statement = statement.where(*self.clauses)
        if self.ordering:
            statement = statement.order_by(*self.ordering)
        return statement

    async def all(self, session: AsyncSession) -> list[ModelT]:
        return list(await session.exec(self.statement()))

    async def first(self, session: AsyncSession) -> ModelT | None:
        return (await session.exec(self.statement())).first()


@dataclass(frozen=True)
class ModelManager(Generic[ModelT]):
    """Entry point for `Model.objects` queries."""

    model: type[ModelT]

    def all(self) -> ModelQuery[ModelT]:
        return ModelQuery(self.model)

    def filter(self, *clauses: ColumnElement[bool]) -> ModelQuery[ModelT]:
        return self.all().filter(*clauses)

    def filter_by(self, **kwargs: object) -> ModelQuery[ModelT]:
        return self.all().filter_by(**kwargs)

    def by_id(self, obj_id: object) -> ModelQuery[ModelT]:
        return self.filter_by(id=obj_id)


class ManagerDescriptor:
    """Class-level descriptor that binds a manager to the accessing model."""

    def __get__(self, instance: object, owner: type[ModelT]) -> ModelManager[ModelT]:
        return ModelManager(owner)
