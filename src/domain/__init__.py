"""
Domain layer - Pure business logic for the deliberation engine.

This layer contains:
- The DeliberationItem aggregate and its value objects
- Stage plan builder, vote outcome evaluator, minutes generator
- The deliberation state machine
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or api.
"""

from src.domain.exceptions import GovernanceError

__all__: list[str] = ["GovernanceError"]
