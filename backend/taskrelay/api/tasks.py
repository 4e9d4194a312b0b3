"""Task CRUD endpoints backed by the task mutation workflow."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from taskrelay.api.deps import CHANNEL_DEP, SESSION_DEP, USER_DEP
from taskrelay.schemas.errors import ErrorResponse
from taskrelay.schemas.tasks import (
    TaskCreate,
    TaskDeleteResponse,
    TaskPriority,
    TaskRead,
    TaskStatus,
    TaskUpdate,
)
from taskrelay.services import task_mutations, task_store
from taskrelay.services import users as users_service
from taskrelay.services.task_mutations import Conflict, Forbidden, NotFound

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from taskrelay.models.tasks import Task
    from taskrelay.models.users import User
    from taskrelay.services.notifications.channel import NotificationChannel
    from taskrelay.services.task_mutations import TaskOutcome

router = APIRouter(prefix="/tasks", tags=["tasks"])
STATUS_QUERY = Query(default=None, alias="status")
PRIORITY_QUERY = Query(default=None)
RUNTIME_ANNOTATION_TYPES = (UUID, TaskStatus, TaskPriority)
_ERR_TASK_NOT_FOUND = "Task not found"
_ERR_ASSIGNEE_NOT_FOUND = "Assigned user not found"

_NOT_FOUND_RESPONSE = {
    "model": ErrorResponse,
    "description": "Task does not exist.",
}
_FORBIDDEN_RESPONSE = {
    "model": ErrorResponse,
    "description": "Caller is neither allowed to change nor delete this task.",
}
_CONFLICT_RESPONSE = {
    "model": ErrorResponse,
    "description": "Task changed since it was read; reload and retry.",
}


def _to_read(tasks: list[Task]) -> list[TaskRead]:
    return [TaskRead.model_validate(task) for task in tasks]


def _unwrap(outcome: TaskOutcome) -> Task:
    """Map a mutation outcome onto its HTTP result."""
    if isinstance(outcome, NotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_ERR_TASK_NOT_FOUND)
    if isinstance(outcome, Forbidden):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Unauthorized to {outcome.action} this task",
        )
    if isinstance(outcome, Conflict):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Task was modified by another request",
                "current_version": outcome.current_version,
            },
        )
    return outcome.task


async def _require_assignee(session: AsyncSession, assigned_to_id: UUID | None) -> None:
    if assigned_to_id is None:
        return
    if not await users_service.user_exists(session, assigned_to_id):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=_ERR_ASSIGNEE_NOT_FOUND,
        )


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description=(
        "Create a task owned by the caller. Any creator in the payload is ignored. "
        "The assignee, if any, receives a `taskAssigned` event."
    ),
)
async def create_task(
    payload: TaskCreate,
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
    channel: NotificationChannel = CHANNEL_DEP,
) -> TaskRead:
    """Create a task."""
    await _require_assignee(session, payload.assigned_to_id)
    task = await task_mutations.create_task(
        session,
        data=payload,
        creator_id=user.id,
        channel=channel,
    )
    return TaskRead.model_validate(task)


@router.get("", response_model=list[TaskRead], summary="List All Tasks")
async def list_tasks(
    session: AsyncSession = SESSION_DEP,
    _user: User = USER_DEP,
    task_status: TaskStatus | None = STATUS_QUERY,
    priority: TaskPriority | None = PRIORITY_QUERY,
) -> list[TaskRead]:
    """List every task, newest first."""
    tasks = await task_store.list_all_tasks(session, status=task_status, priority=priority)
    return _to_read(tasks)


@router.get("/my", response_model=list[TaskRead], summary="List My Tasks")
async def list_my_tasks(
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
    task_status: TaskStatus | None = STATUS_QUERY,
    priority: TaskPriority | None = PRIORITY_QUERY,
) -> list[TaskRead]:
    """List tasks the caller created or is assigned to."""
    tasks = await task_store.list_tasks_for_user(
        session,
        user.id,
        status=task_status,
        priority=priority,
    )
    return _to_read(tasks)


@router.get("/created", response_model=list[TaskRead], summary="List Tasks I Created")
async def list_created_tasks(
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
    task_status: TaskStatus | None = STATUS_QUERY,
    priority: TaskPriority | None = PRIORITY_QUERY,
) -> list[TaskRead]:
    """List tasks the caller created."""
    tasks = await task_store.list_tasks_created_by(
        session,
        user.id,
        status=task_status,
        priority=priority,
    )
    return _to_read(tasks)


@router.get("/assigned", response_model=list[TaskRead], summary="List Tasks Assigned To Me")
async def list_assigned_tasks(
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
    task_status: TaskStatus | None = STATUS_QUERY,
    priority: TaskPriority | None = PRIORITY_QUERY,
) -> list[TaskRead]:
    """List tasks assigned to the caller."""
    tasks = await task_store.list_tasks_assigned_to(
        session,
        user.id,
        status=task_status,
        priority=priority,
    )
    return _to_read(tasks)


@router.get("/overdue", response_model=list[TaskRead], summary="List Overdue Tasks")
async def list_overdue_tasks(
    session: AsyncSession = SESSION_DEP,
    _user: User = USER_DEP,
) -> list[TaskRead]:
    """List unfinished tasks past their due date, soonest first."""
    return _to_read(await task_store.list_overdue_tasks(session))


@router.get(
    "/{task_id}",
    response_model=TaskRead,
    summary="Get Task",
    responses={status.HTTP_404_NOT_FOUND: _NOT_FOUND_RESPONSE},
)
async def get_task(
    task_id: UUID,
    session: AsyncSession = SESSION_DEP,
    _user: User = USER_DEP,
) -> TaskRead:
    """Return one task."""
    task = await task_store.get_task(session, task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_ERR_TASK_NOT_FOUND)
    return TaskRead.model_validate(task)


@router.put(
    "/{task_id}",
    response_model=TaskRead,
    summary="Update Task",
    description=(
        "Partially update a task. Only its creator or current assignee may do so. "
        "Omitted fields are unchanged; `description` and `assigned_to_id` accept null to clear."
    ),
    responses={
        status.HTTP_403_FORBIDDEN: _FORBIDDEN_RESPONSE,
        status.HTTP_404_NOT_FOUND: _NOT_FOUND_RESPONSE,
        status.HTTP_409_CONFLICT: _CONFLICT_RESPONSE,
    },
)
@router.patch(
    "/{task_id}",
    response_model=TaskRead,
    summary="Patch Task",
    responses={
        status.HTTP_403_FORBIDDEN: _FORBIDDEN_RESPONSE,
        status.HTTP_404_NOT_FOUND: _NOT_FOUND_RESPONSE,
        status.HTTP_409_CONFLICT: _CONFLICT_RESPONSE,
    },
)
async def update_task(
    task_id: UUID,
    payload: TaskUpdate,
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
    channel: NotificationChannel = CHANNEL_DEP,
) -> TaskRead:
    """Update a task as its creator or assignee."""
    if "assigned_to_id" in payload.model_fields_set:
        await _require_assignee(session, payload.assigned_to_id)
    outcome = await task_mutations.update_task(
        session,
        task_id=task_id,
        patch=payload,
        requester_id=user.id,
        channel=channel,
    )
    return TaskRead.model_validate(_unwrap(outcome))


@router.delete(
    "/{task_id}",
    response_model=TaskDeleteResponse,
    summary="Delete Task",
    description="Permanently delete a task. Only its creator may do so.",
    responses={
        status.HTTP_403_FORBIDDEN: _FORBIDDEN_RESPONSE,
        status.HTTP_404_NOT_FOUND: _NOT_FOUND_RESPONSE,
        status.HTTP_409_CONFLICT: _CONFLICT_RESPONSE,
    },
)
async def delete_task(
    task_id: UUID,
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
    channel: NotificationChannel = CHANNEL_DEP,
) -> TaskDeleteResponse:
    """Delete a task as its creator."""
    outcome = await task_mutations.delete_task(
        session,
        task_id=task_id,
        requester_id=user.id,
        channel=channel,
    )
    return TaskDeleteResponse(task=TaskRead.model_validate(_unwrap(outcome)))
