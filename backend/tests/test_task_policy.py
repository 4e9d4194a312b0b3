# ruff: noqa: INP001
"""Access rules and notification fan-out for task changes."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from taskrelay.models.tasks import Task
from taskrelay.services.task_policy import (
    NotificationTarget,
    TaskEvent,
    can_delete,
    can_modify,
    notification_targets,
)


def _task(*, creator_id: UUID, assigned_to_id: UUID | None = None) -> Task:
    return Task(
        id=uuid4(),
        title="Write report",
        due_date=datetime(2030, 1, 1),
        priority="High",
        creator_id=creator_id,
        assigned_to_id=assigned_to_id,
    )


def test_creator_and_assignee_may_modify_others_may_not() -> None:
    creator, assignee, outsider = uuid4(), uuid4(), uuid4()
    task = _task(creator_id=creator, assigned_to_id=assignee)

    assert can_modify(task, creator)
    assert can_modify(task, assignee)
    assert not can_modify(task, outsider)


def test_unassigned_task_is_modifiable_only_by_creator() -> None:
    creator = uuid4()
    task = _task(creator_id=creator)

    assert can_modify(task, creator)
    assert not can_modify(task, uuid4())


def test_only_creator_may_delete() -> None:
    creator, assignee = uuid4(), uuid4()
    task = _task(creator_id=creator, assigned_to_id=assignee)

    assert can_delete(task, creator)
    assert not can_delete(task, assignee)
    assert not can_delete(task, uuid4())


def test_assigned_event_targets_only_the_assignee() -> None:
    creator, assignee = uuid4(), uuid4()
    task = _task(creator_id=creator, assigned_to_id=assignee)

    assert notification_targets(TaskEvent.ASSIGNED, task) == [
        NotificationTarget(assignee, TaskEvent.ASSIGNED),
    ]
    assert notification_targets(TaskEvent.ASSIGNED, _task(creator_id=creator)) == []


def test_self_assigned_task_notifies_creator_once() -> None:
    creator = uuid4()
    task = _task(creator_id=creator, assigned_to_id=creator)

    assert notification_targets(TaskEvent.UPDATED, task) == [
        NotificationTarget(creator, TaskEvent.UPDATED),
    ]
    assert notification_targets(TaskEvent.ASSIGNED, task) == [
        NotificationTarget(creator, TaskEvent.ASSIGNED),
    ]


def test_update_without_reassignment_notifies_original_parties() -> None:
    creator, assignee = uuid4(), uuid4()
    task = _task(creator_id=creator, assigned_to_id=assignee)

    targets = notification_targets(TaskEvent.UPDATED, task, new_assigned_to_id=assignee)

    assert targets == [
        NotificationTarget(creator, TaskEvent.UPDATED),
        NotificationTarget(assignee, TaskEvent.UPDATED),
    ]


def test_reassignment_tells_old_parties_and_new_assignee() -> None:
    creator, old_assignee, new_assignee = uuid4(), uuid4(), uuid4()
    task = _task(creator_id=creator, assigned_to_id=old_assignee)

    targets = notification_targets(TaskEvent.UPDATED, task, new_assigned_to_id=new_assignee)

    assert targets == [
        NotificationTarget(creator, TaskEvent.UPDATED),
        NotificationTarget(old_assignee, TaskEvent.UPDATED),
        NotificationTarget(new_assignee, TaskEvent.ASSIGNED),
    ]


def test_unassigning_sends_no_assigned_event() -> None:
    creator, assignee = uuid4(), uuid4()
    task = _task(creator_id=creator, assigned_to_id=assignee)

    targets = notification_targets(TaskEvent.UPDATED, task, new_assigned_to_id=None)

    assert {target.event for target in targets} == {TaskEvent.UPDATED}
    assert {target.user_id for target in targets} == {creator, assignee}


def test_delete_notifies_parties_from_snapshot() -> None:
    creator, assignee = uuid4(), uuid4()
    task = _task(creator_id=creator, assigned_to_id=assignee)

    targets = notification_targets(TaskEvent.DELETED, task)

    assert targets == [
        NotificationTarget(creator, TaskEvent.DELETED),
        NotificationTarget(assignee, TaskEvent.DELETED),
    ]


def test_event_wire_labels() -> None:
    assert TaskEvent.ASSIGNED.value == "taskAssigned"
    assert TaskEvent.UPDATED.value == "taskUpdated"
    assert TaskEvent.DELETED.value == "taskDeleted"
