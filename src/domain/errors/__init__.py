"""Domain errors for the deliberation engine.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from GovernanceError.
"""

from src.domain.errors.deliberation import (
    DeliberationError,
    DeliberationNotFoundError,
    DeliberationValidationError,
    ExecutionTaskNotFoundError,
    InvalidTransitionError,
    StageNotFoundError,
)

__all__: list[str] = [
    "DeliberationError",
    "DeliberationNotFoundError",
    "DeliberationValidationError",
    "ExecutionTaskNotFoundError",
    "InvalidTransitionError",
    "StageNotFoundError",
]
