"""Deliberation repository port.

Persistence is supplied by the host application. The engine only needs
to load an aggregate by id, save a new version of it, and list all
items for the query surface.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.deliberation_item import DeliberationItem


class DeliberationRepositoryProtocol(Protocol):
    """Protocol for deliberation item storage.

    Implementations store whole aggregates; a save replaces the previous
    version of the same item_id.
    """

    async def get(self, item_id: str) -> DeliberationItem | None:
        """Load an item by id.

        Args:
            item_id: ID of the deliberation.

        Returns:
            The stored item, or None if not found.
        """
        ...

    async def save(self, item: DeliberationItem) -> None:
        """Store (insert or replace) an item.

        Args:
            item: The aggregate to store.
        """
        ...

    async def list_all(self) -> list[DeliberationItem]:
        """Return every stored item, newest submission first."""
        ...
