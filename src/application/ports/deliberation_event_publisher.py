"""Deliberation event publisher port.

The engine emits the audit entries and execution items it creates so a
host pipeline (notifications, observability, project tooling) can
consume them. Delivery is the host's concern.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from src.domain.models.audit_trail import AuditTrailEntry
from src.domain.models.execution_item import ExecutionItem


class DeliberationEventPublisherProtocol(Protocol):
    """Protocol for publishing records produced by transitions."""

    async def publish_audit_entries(
        self,
        item_id: str,
        entries: Sequence[AuditTrailEntry],
    ) -> None:
        """Publish newly appended audit entries, oldest first.

        Args:
            item_id: Deliberation the entries belong to.
            entries: New entries in the order they were appended.
        """
        ...

    async def publish_execution_item(
        self,
        item_id: str,
        execution_item: ExecutionItem,
    ) -> None:
        """Publish a newly created execution item.

        Args:
            item_id: Deliberation the task belongs to.
            execution_item: The created task.
        """
        ...
