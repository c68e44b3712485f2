"""Entity reference validator port (optional collaborator).

Execution tasks may point at external projects, contracts or risks. When
the host wires a validator, the command service asks it before storing
the reference; without one, references are stored as given.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.execution_item import LinkedEntityType


class EntityReferenceValidatorProtocol(Protocol):
    """Protocol for checking that a linked entity exists."""

    async def exists(self, entity_type: LinkedEntityType, entity_id: str) -> bool:
        """Check an external entity reference.

        Args:
            entity_type: Kind of entity.
            entity_id: Identifier within the owning service.

        Returns:
            True if the entity exists.
        """
        ...
