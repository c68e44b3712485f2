"""Audit trail domain model.

Audit entries are immutable log lines attached to a deliberation item.
The trail is append-only and kept newest-first; entries are never
mutated or removed once appended.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class AuditAction(Enum):
    """Kinds of recorded activity on a deliberation."""

    STATUS_CHANGED = "status_changed"
    FIELD_EDITED = "field_edited"
    VOTE_CAST = "vote_cast"
    VOTING_STARTED = "voting_started"
    VOTING_CLOSED = "voting_closed"
    EVIDENCE_ADDED = "evidence_added"
    REVIEW_REQUESTED = "review_requested"
    STAGE_TRANSITIONED = "stage_transitioned"
    MINUTES_GENERATED = "minutes_generated"
    MINUTES_PUBLISHED = "minutes_published"
    DECISION_ISSUED = "decision_issued"
    EXECUTION_TASK_CREATED = "execution_task_created"


@dataclass(frozen=True, eq=True)
class AuditTrailEntry:
    """A single immutable audit line.

    Attributes:
        entry_id: Unique identifier of the entry.
        item_id: Deliberation the entry belongs to.
        action: Kind of activity recorded.
        description: Human-readable description.
        user_id: Actor who performed the action.
        user_name: Display name of the actor.
        timestamp: When the action happened (UTC).
        previous_value: Value before the change, if applicable.
        new_value: Value after the change, if applicable.
    """

    entry_id: str
    item_id: str
    action: AuditAction
    description: str
    user_id: str
    user_name: str
    timestamp: datetime
    previous_value: str | None = field(default=None)
    new_value: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "entry_id": self.entry_id,
            "item_id": self.item_id,
            "action": self.action.value,
            "description": self.description,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "previous_value": self.previous_value,
            "new_value": self.new_value,
            "timestamp": self.timestamp.isoformat(),
        }
