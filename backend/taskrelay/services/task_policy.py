"""Task access rules and notification-target selection.

Pure decision functions over a task snapshot and an acting user id:

- creator or current assignee may modify a task;
- only the creator may delete it;
- every change fans out to the parties that held the task before the write,
  plus the new assignee on reassignment.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from taskrelay.models.tasks import Task


class TaskEvent(str, Enum):
    """Live event labels delivered to a user's room."""

    ASSIGNED = "taskAssigned"
    UPDATED = "taskUpdated"
    DELETED = "taskDeleted"


@dataclass(frozen=True)
class NotificationTarget:
    """One event to deliver to one user identity."""

    user_id: UUID
    event: TaskEvent


def can_modify(task: Task, user_id: UUID) -> bool:
    """Return whether `user_id` may update `task`."""
    return user_id == task.creator_id or (
        task.assigned_to_id is not None and user_id == task.assigned_to_id
    )


def can_delete(task: Task, user_id: UUID) -> bool:
    """Return whether `user_id` may delete `task`. Assignees never can."""
    return user_id == task.creator_id


def _parties(task: Task) -> list[UUID]:
    parties = [task.creator_id]
    if task.assigned_to_id is not None and task.assigned_to_id != task.creator_id:
        parties.append(task.assigned_to_id)
    return parties


def notification_targets(
    event: TaskEvent,
    task: Task,
    *,
    new_assigned_to_id: UUID | None = None,
) -> list[NotificationTarget]:
    """Compute who hears about a change.

    `task` is the post-write record for `ASSIGNED` (creation) and the
    pre-write snapshot for `UPDATED` and `DELETED`. For updates,
    `new_assigned_to_id` is the assignee after the write.
    """
    if event is TaskEvent.ASSIGNED:
        if task.assigned_to_id is None:
            return []
        return [NotificationTarget(task.assigned_to_id, TaskEvent.ASSIGNED)]

    targets = [NotificationTarget(user_id, event) for user_id in _parties(task)]
    if (
        event is TaskEvent.UPDATED
        and new_assigned_to_id is not None
        and new_assigned_to_id != task.assigned_to_id
    ):
        targets.append(NotificationTarget(new_assigned_to_id, TaskEvent.ASSIGNED))
    return targets
