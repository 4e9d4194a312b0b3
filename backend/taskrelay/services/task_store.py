"""Task persistence helpers: the storage side of task mutations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, or_, update
from sqlmodel import col

from taskrelay.core.time import utcnow
from taskrelay.models.tasks import Task

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

    from taskrelay.db.query_manager import ModelQuery

MUTABLE_FIELDS = frozenset(
    {"title", "description", "due_date", "priority", "status", "assigned_to_id"},
)


def _apply_filters(
    query: ModelQuery[Task],
    *,
    status: str | None,
    priority: str | None,
) -> ModelQuery[Task]:
    if status is not None:
        query = query.filter(col(Task.status) == status)
    if priority is not None:
        query = query.filter(col(Task.priority) == priority)
    return query


async def create_task(session: AsyncSession, *, task: Task) -> Task:
    """Insert a new task and return the committed row."""
    session.add(task)
    await session.commit()
    await session.refresh(task)
    return task


async def get_task(session: AsyncSession, task_id: UUID) -> Task | None:
    """Fetch a detached point-in-time snapshot of one task."""
    task = await Task.objects.by_id(task_id).first(session)
    if task is not None:
        # Later reloads must not overwrite the snapshot callers keep.
        session.expunge(task)
    return task


async def list_tasks_for_user(
    session: AsyncSession,
    user_id: UUID,
    *,
    status: str | None = None,
    priority: str | None = None,
) -> list[Task]:
    """Tasks the user created or is assigned to, newest first."""
    query = Task.objects.filter(
        or_(col(Task.creator_id) == user_id, col(Task.assigned_to_id) == user_id),
    )
    query = _apply_filters(query, status=status, priority=priority)
    return await query.order_by(col(Task.created_at).desc()).all(session)


async def list_all_tasks(
    session: AsyncSession,
    *,
    status: str | None = None,
    priority: str | None = None,
) -> list[Task]:
    """Every task, newest first."""
    query = _apply_filters(Task.objects.all(), status=status, priority=priority)
    return await query.order_by(col(Task.created_at).desc()).all(session)


async def list_tasks_created_by(
    session: AsyncSession,
    creator_id: UUID,
    *,
    status: str | None = None,
    priority: str | None = None,
) -> list[Task]:
    query = _apply_filters(
        Task.objects.filter_by(creator_id=creator_id),
        status=status,
        priority=priority,
    )
    return await query.order_by(col(Task.created_at).desc()).all(session)


async def list_tasks_assigned_to(
    session: AsyncSession,
    assigned_to_id: UUID,
    *,
    status: str | None = None,
    priority: str | None = None,
) -> list[Task]:
    query = _apply_filters(
        Task.objects.filter_by(assigned_to_id=assigned_to_id),
        status=status,
        priority=priority,
    )
    return await query.order_by(col(Task.created_at).desc()).all(session)


async def list_overdue_tasks(session: AsyncSession) -> list[Task]:
    """Unfinished tasks whose due date has passed, soonest-due first."""
    return (
        await Task.objects.filter(
            col(Task.due_date) < utcnow(),
            col(Task.status) != "Completed",
        )
        .order_by(col(Task.due_date).asc())
        .all(session)
    )


async def update_task(
    session: AsyncSession,
    *,
    task_id: UUID,
    expected_version: int,
    changes: dict[str, object],
) -> Task | None:
    """Apply `changes` only if the stored version still equals `expected_version`.

    Returns the updated task, or `None` when no row matched (the task was
    deleted or written by someone else since it was read).
    """
    unknown = set(changes) - MUTABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields are not writable: {sorted(unknown)}")
    statement = (
        update(Task)
        .where(col(Task.id) == task_id, col(Task.version) == expected_version)
        .values(**changes, version=expected_version + 1, updated_at=utcnow())
    )
    conn = await session.connection()
    result = await conn.execute(statement)
    if result.rowcount != 1:
        return None
    await session.commit()
    return await get_task(session, task_id)


async def delete_task(
    session: AsyncSession,
    *,
    task_id: UUID,
    expected_version: int,
) -> bool:
    """Permanently remove a task if its version still equals `expected_version`."""
    statement = delete(Task).where(
        col(Task.id) == task_id,
        col(Task.version) == expected_version,
    )
    conn = await session.connection()
    result = await conn.execute(statement)
    if result.rowcount != 1:
        return False
    await session.commit()
    return True
