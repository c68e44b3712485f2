"""Execution item domain model.

Execution items are post-resolution follow-up tasks. Each may reference an
external project, contract or risk by type and id; the engine stores the
reference without validating that the entity exists.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

# Days until a follow-up task is due when the caller gives no date
DEFAULT_EXECUTION_DUE_DAYS = 7


class ExecutionItemStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class LinkedEntityType(Enum):
    """External entity kinds an execution item can point at."""

    PROJECT = "project"
    CONTRACT = "contract"
    RISK = "risk"


@dataclass(frozen=True, eq=True)
class ExecutionTaskSpec:
    """Caller-supplied description of a follow-up task.

    Attributes:
        title: Task title.
        owner_name: Person or team accountable for the task.
        due_date: Explicit due date; defaults to the configured offset.
        linked_entity_type: Kind of external entity referenced.
        linked_entity_id: Identifier of the referenced entity.
    """

    title: str
    owner_name: str
    due_date: datetime | None = field(default=None)
    linked_entity_type: LinkedEntityType | None = field(default=None)
    linked_entity_id: str | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate that an entity link is either complete or absent."""
        if (self.linked_entity_type is None) != (self.linked_entity_id is None):
            raise ValueError(
                "linked_entity_type and linked_entity_id must be provided together"
            )


@dataclass(frozen=True, eq=True)
class ExecutionItem:
    """A follow-up task attached to a resolved deliberation.

    Attributes:
        task_id: Generated identifier.
        title: Task title.
        owner_name: Accountable person or team.
        due_date: When the task is due.
        status: Progress of the task.
        linked_entity_type: Kind of external entity referenced (optional).
        linked_entity_id: Identifier of the referenced entity (optional).
    """

    task_id: str
    title: str
    owner_name: str
    due_date: datetime
    status: ExecutionItemStatus = field(default=ExecutionItemStatus.PENDING)
    linked_entity_type: LinkedEntityType | None = field(default=None)
    linked_entity_id: str | None = field(default=None)

    @property
    def is_completed(self) -> bool:
        return self.status == ExecutionItemStatus.COMPLETED

    def with_status(self, status: ExecutionItemStatus) -> ExecutionItem:
        """Return a copy of this item with a new status."""
        return replace(self, status=status)

    def summary(self) -> str:
        """Render the item as it appears in minutes: "title (owner)"."""
        return f"{self.title} ({self.owner_name})"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "task_id": self.task_id,
            "title": self.title,
            "owner_name": self.owner_name,
            "due_date": self.due_date.isoformat(),
            "status": self.status.value,
            "linked_entity_type": (
                self.linked_entity_type.value if self.linked_entity_type else None
            ),
            "linked_entity_id": self.linked_entity_id,
        }
