"""Execution task tracker.

Creates and updates post-resolution follow-up tasks. A task may reference
an external project, contract or risk; the reference is stored as given.
Existence checks belong to the owning external service.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from src.domain.errors.deliberation import ExecutionTaskNotFoundError
from src.domain.models.deliberation_item import DeliberationItem
from src.domain.models.execution_item import (
    ExecutionItem,
    ExecutionItemStatus,
    ExecutionTaskSpec,
)


def create_execution_task(
    spec: ExecutionTaskSpec,
    task_id: str,
    now: datetime,
    default_due_days: int,
) -> ExecutionItem:
    """Materialize a follow-up task from a caller spec.

    Args:
        spec: Task description.
        task_id: Generated identifier.
        now: Current time, used for the default due date.
        default_due_days: Days until due when the spec has no due date.

    Returns:
        A PENDING ExecutionItem.
    """
    return ExecutionItem(
        task_id=task_id,
        title=spec.title,
        owner_name=spec.owner_name,
        due_date=spec.due_date or now + timedelta(days=default_due_days),
        status=ExecutionItemStatus.PENDING,
        linked_entity_type=spec.linked_entity_type,
        linked_entity_id=spec.linked_entity_id,
    )


def append_task(
    items: tuple[ExecutionItem, ...], task: ExecutionItem
) -> tuple[ExecutionItem, ...]:
    return (*items, task)


def update_task_status(
    item: DeliberationItem,
    task_id: str,
    status: ExecutionItemStatus,
) -> tuple[tuple[ExecutionItem, ...], ExecutionItem]:
    """Return the item's tasks with one task's status replaced.

    Args:
        item: Deliberation owning the task.
        task_id: Task to update.
        status: New status.

    Returns:
        Tuple of (updated task tuple, previous version of the task).

    Raises:
        ExecutionTaskNotFoundError: If the task is not on the item.
    """
    previous = item.execution_item(task_id)
    if previous is None:
        raise ExecutionTaskNotFoundError(item_id=item.item_id, task_id=task_id)
    updated = previous.with_status(status)
    tasks = tuple(updated if t.task_id == task_id else t for t in item.execution_items)
    return tasks, previous


def all_tasks_completed(item: DeliberationItem) -> bool:
    """True when every execution item is completed (vacuously true if none)."""
    return all(task.is_completed for task in item.execution_items)
