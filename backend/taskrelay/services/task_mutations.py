"""Task mutation workflow: load, authorize, write, then notify.

Every change runs as one sequence per request:

1. fetch the current task (update/delete);
2. missing task -> `NotFound`;
3. access policy denies -> `Forbidden`;
4. write, conditional on the version that was read (`Conflict` on mismatch);
5. fan notifications out from the pre-write snapshot (or the created row);
6. return the resulting task.

Outcomes are returned as values, not raised. Storage errors propagate
unchanged, and nothing is published for a write that did not commit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from taskrelay.core.logging import get_logger
from taskrelay.models.tasks import Task
from taskrelay.schemas.tasks import TaskRead
from taskrelay.services import task_store
from taskrelay.services.notifications.channel import Notification
from taskrelay.services.task_policy import (
    NotificationTarget,
    TaskEvent,
    can_delete,
    can_modify,
    notification_targets,
)

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

    from taskrelay.schemas.tasks import TaskCreate, TaskUpdate
    from taskrelay.services.notifications.channel import NotificationChannel

logger = get_logger(__name__)


@dataclass(frozen=True)
class Ok:
    """The operation committed; `task` is the resulting (or removed) record."""

    task: Task


@dataclass(frozen=True)
class NotFound:
    """No task with `task_id` exists."""

    task_id: UUID


@dataclass(frozen=True)
class Forbidden:
    """The caller is authenticated but may not perform `action` on the task."""

    task_id: UUID
    action: str


@dataclass(frozen=True)
class Conflict:
    """The task changed between the read and the conditional write."""

    task_id: UUID
    current_version: int | None = None


TaskOutcome = Ok | NotFound | Forbidden | Conflict


def task_payload(task: Task) -> dict[str, object]:
    """JSON-ready task body used for notification payloads."""
    return TaskRead.model_validate(task).model_dump(mode="json")


async def dispatch_notifications(
    channel: NotificationChannel,
    targets: list[NotificationTarget],
    task: Task,
) -> None:
    """Publish one event per target; failures are logged and dropped."""
    if not targets:
        return
    payload = task_payload(task)
    for target in targets:
        try:
            await channel.publish(
                target.user_id,
                Notification(event=target.event.value, payload=payload),
            )
        except Exception:
            logger.warning(
                "task.notification.publish_failed",
                extra={
                    "task_id": str(task.id),
                    "user_id": str(target.user_id),
                    "event": target.event.value,
                },
                exc_info=True,
            )


async def create_task(
    session: AsyncSession,
    *,
    data: TaskCreate,
    creator_id: UUID,
    channel: NotificationChannel,
) -> Task:
    """Create a task owned by `creator_id` and notify its assignee."""
    task = Task(**data.model_dump(), creator_id=creator_id)
    task = await task_store.create_task(session, task=task)
    logger.info(
        "task.create",
        extra={
            "task_id": str(task.id),
            "creator_id": str(creator_id),
            "assigned_to_id": str(task.assigned_to_id) if task.assigned_to_id else None,
        },
    )
    await dispatch_notifications(
        channel,
        notification_targets(TaskEvent.ASSIGNED, task),
        task,
    )
    return task


async def update_task(
    session: AsyncSession,
    *,
    task_id: UUID,
    patch: TaskUpdate,
    requester_id: UUID,
    channel: NotificationChannel,
) -> TaskOutcome:
    """Apply a partial update if the requester is the creator or assignee."""
    current = await task_store.get_task(session, task_id)
    if current is None:
        return NotFound(task_id)
    if not can_modify(current, requester_id):
        logger.warning(
            "task.update.forbidden",
            extra={"task_id": str(task_id), "requester_id": str(requester_id)},
        )
        return Forbidden(task_id, action="update")
    if patch.expected_version is not None and patch.expected_version != current.version:
        return Conflict(task_id, current_version=current.version)

    updated = await task_store.update_task(
        session,
        task_id=task_id,
        expected_version=current.version,
        changes=patch.changes(),
    )
    if updated is None:
        latest = await task_store.get_task(session, task_id)
        if latest is None:
            return NotFound(task_id)
        logger.info(
            "task.update.conflict",
            extra={"task_id": str(task_id), "read_version": current.version},
        )
        return Conflict(task_id, current_version=latest.version)

    logger.info(
        "task.update",
        extra={
            "task_id": str(task_id),
            "requester_id": str(requester_id),
            "version": updated.version,
        },
    )
    await dispatch_notifications(
        channel,
        notification_targets(
            TaskEvent.UPDATED,
            current,
            new_assigned_to_id=updated.assigned_to_id,
        ),
        updated,
    )
    return Ok(updated)


async def delete_task(
    session: AsyncSession,
    *,
    task_id: UUID,
    requester_id: UUID,
    channel: NotificationChannel,
) -> TaskOutcome:
    """Permanently delete a task if the requester created it."""
    current = await task_store.get_task(session, task_id)
    if current is None:
        return NotFound(task_id)
    if not can_delete(current, requester_id):
        logger.warning(
            "task.delete.forbidden",
            extra={"task_id": str(task_id), "requester_id": str(requester_id)},
        )
        return Forbidden(task_id, action="delete")

    deleted = await task_store.delete_task(
        session,
        task_id=task_id,
        expected_version=current.version,
    )
    if not deleted:
        latest = await task_store.get_task(session, task_id)
        if latest is None:
            return NotFound(task_id)
        return Conflict(task_id, current_version=latest.version)

    logger.info(
        "task.delete",
        extra={"task_id": str(task_id), "requester_id": str(requester_id)},
    )
    await dispatch_notifications(
        channel,
        notification_targets(TaskEvent.DELETED, current),
        current,
    )
    return Ok(current)
