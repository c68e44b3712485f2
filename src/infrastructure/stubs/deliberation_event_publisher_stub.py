"""Deliberation Event Publisher Stub.

Records published audit entries and execution items in memory and logs
each publication with structlog.
"""

from __future__ import annotations

from typing import Sequence

import structlog

from src.application.ports.deliberation_event_publisher import (
    DeliberationEventPublisherProtocol,
)
from src.domain.models.audit_trail import AuditTrailEntry
from src.domain.models.execution_item import ExecutionItem

logger = structlog.get_logger()


class DeliberationEventPublisherStub(DeliberationEventPublisherProtocol):
    """In-memory publisher for development and testing.

    Attributes:
        audit_entries: Every published entry, in publication order.
        execution_items: Every published (item_id, task) pair.
    """

    def __init__(self) -> None:
        self.audit_entries: list[AuditTrailEntry] = []
        self.execution_items: list[tuple[str, ExecutionItem]] = []

    def clear(self) -> None:
        """Clear recorded publications (test helper)."""
        self.audit_entries.clear()
        self.execution_items.clear()

    async def publish_audit_entries(
        self,
        item_id: str,
        entries: Sequence[AuditTrailEntry],
    ) -> None:
        self.audit_entries.extend(entries)
        logger.debug(
            "audit_entries_published",
            item_id=item_id,
            actions=[e.action.value for e in entries],
        )

    async def publish_execution_item(
        self,
        item_id: str,
        execution_item: ExecutionItem,
    ) -> None:
        self.execution_items.append((item_id, execution_item))
        logger.debug(
            "execution_item_published",
            item_id=item_id,
            task_id=execution_item.task_id,
        )
