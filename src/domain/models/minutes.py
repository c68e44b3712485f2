"""Minutes domain model - the textual record of a resolution."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any


class MinutesStatus(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


@dataclass(frozen=True, eq=True)
class Minutes:
    """Resolution minutes for a deliberation.

    Attributes:
        status: Draft until published.
        agenda_summary: Agenda line (the deliberation title).
        evidence_list: Names of attached evidence.
        voting_result: Tally string, e.g. "Yes 3 | No 1 | Abstain 0".
        decision_text: "Resolved Approved" or "Resolved Rejected".
        action_items: Execution items rendered as "title (owner)".
        published_at: When the minutes were published.
    """

    status: MinutesStatus
    agenda_summary: str
    evidence_list: tuple[str, ...]
    voting_result: str
    decision_text: str
    action_items: tuple[str, ...]
    published_at: datetime | None = field(default=None)

    def publish(self, published_at: datetime) -> Minutes:
        """Return a published copy of these minutes."""
        return replace(self, status=MinutesStatus.PUBLISHED, published_at=published_at)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "status": self.status.value,
            "agenda_summary": self.agenda_summary,
            "evidence_list": list(self.evidence_list),
            "voting_result": self.voting_result,
            "decision_text": self.decision_text,
            "action_items": list(self.action_items),
            "published_at": self.published_at.isoformat() if self.published_at else None,
        }
