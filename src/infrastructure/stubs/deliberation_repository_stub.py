"""Deliberation Repository Stub.

This module provides an in-memory stub implementation of
DeliberationRepositoryProtocol for development and testing.
"""

from __future__ import annotations

from src.application.ports.deliberation_repository import (
    DeliberationRepositoryProtocol,
)
from src.domain.models.deliberation_item import DeliberationItem


class DeliberationRepositoryStub(DeliberationRepositoryProtocol):
    """In-memory stub implementation of DeliberationRepositoryProtocol.

    Items are kept by id; a save replaces the stored version. It is NOT
    suitable for production use.

    Attributes:
        save_count: Number of save calls (test helper).
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._items: dict[str, DeliberationItem] = {}
        self.save_count = 0

    def add_item(self, item: DeliberationItem) -> None:
        """Store an item without counting a save (test helper).

        Args:
            item: The item to store.
        """
        self._items[item.item_id] = item

    def clear(self) -> None:
        """Clear all stored data (test helper)."""
        self._items.clear()
        self.save_count = 0

    async def get(self, item_id: str) -> DeliberationItem | None:
        return self._items.get(item_id)

    async def save(self, item: DeliberationItem) -> None:
        self._items[item.item_id] = item
        self.save_count += 1

    async def list_all(self) -> list[DeliberationItem]:
        """Return all items, most recently submitted (or created) first."""
        return sorted(
            self._items.values(),
            key=lambda i: i.submitted_at or i.created_at,
            reverse=True,
        )
