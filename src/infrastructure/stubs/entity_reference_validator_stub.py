"""Entity Reference Validator Stub.

Accepts only references registered through register(). Used in tests of
the optional linked-entity check.
"""

from __future__ import annotations

from src.application.ports.entity_reference_validator import (
    EntityReferenceValidatorProtocol,
)
from src.domain.models.execution_item import LinkedEntityType


class EntityReferenceValidatorStub(EntityReferenceValidatorProtocol):
    """In-memory set of known (type, id) references."""

    def __init__(self) -> None:
        self._known: set[tuple[LinkedEntityType, str]] = set()

    def register(self, entity_type: LinkedEntityType, entity_id: str) -> None:
        """Make a reference valid (test helper)."""
        self._known.add((entity_type, entity_id))

    async def exists(self, entity_type: LinkedEntityType, entity_id: str) -> bool:
        return (entity_type, entity_id) in self._known
