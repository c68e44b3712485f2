"""Deliberation domain errors.

This module defines domain-specific exceptions for the deliberation
workflow engine. All errors inherit from GovernanceError.

Taxonomy:
- InvalidTransitionError: command invoked outside its valid source state
- DeliberationNotFoundError / StageNotFoundError / ExecutionTaskNotFoundError:
  referenced id not found
- DeliberationValidationError: submission or command payload is invalid
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.domain.exceptions import GovernanceError

if TYPE_CHECKING:
    from src.domain.models.deliberation_item import DeliberationStatus


class DeliberationError(GovernanceError):
    """Base class for deliberation-related errors."""

    pass


class InvalidTransitionError(DeliberationError):
    """Raised when a command is invoked outside its valid source state.

    Only raised when strict transitions are enabled; the default engine
    behaviour returns the item unchanged instead.

    Attributes:
        item_id: ID of the deliberation item.
        operation: Name of the rejected operation (e.g. "cast_vote").
        current_status: Status the item was in.
        allowed_statuses: Statuses from which the operation is valid.
        reason: Optional extra detail (e.g. "no active stage").
    """

    def __init__(
        self,
        item_id: str,
        operation: str,
        current_status: DeliberationStatus,
        allowed_statuses: tuple[DeliberationStatus, ...] = (),
        reason: str | None = None,
    ) -> None:
        """Initialize InvalidTransitionError.

        Args:
            item_id: ID of the deliberation item.
            operation: Name of the rejected operation.
            current_status: Current deliberation status.
            allowed_statuses: Valid source statuses for the operation.
            reason: Optional extra detail.
        """
        self.item_id = item_id
        self.operation = operation
        self.current_status = current_status
        self.allowed_statuses = allowed_statuses
        self.reason = reason

        allowed_str = (
            f" Valid from: {[s.value for s in allowed_statuses]}."
            if allowed_statuses
            else ""
        )
        reason_str = f" {reason}." if reason else ""
        super().__init__(
            f"Cannot {operation} deliberation {item_id} in status "
            f"{current_status.value}.{allowed_str}{reason_str}"
        )


class DeliberationNotFoundError(DeliberationError):
    """Raised when a deliberation item does not exist.

    Attributes:
        item_id: The ID that was not found.
    """

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Deliberation {item_id} not found")


class StageNotFoundError(DeliberationError):
    """Raised when a referenced stage is not part of the item's plan.

    Attributes:
        item_id: ID of the deliberation item.
        stage_id: The stage ID that was not found.
    """

    def __init__(self, item_id: str, stage_id: str) -> None:
        self.item_id = item_id
        self.stage_id = stage_id
        super().__init__(f"Stage {stage_id} not found on deliberation {item_id}")


class ExecutionTaskNotFoundError(DeliberationError):
    """Raised when a referenced execution task does not exist on the item.

    Attributes:
        item_id: ID of the deliberation item.
        task_id: The task ID that was not found.
    """

    def __init__(self, item_id: str, task_id: str) -> None:
        self.item_id = item_id
        self.task_id = task_id
        super().__init__(f"Execution task {task_id} not found on deliberation {item_id}")


class DeliberationValidationError(DeliberationError):
    """Raised when a submission or command payload fails validation.

    Attributes:
        field: Name of the offending field.
        message: Descriptive error message.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"Invalid {field}: {message}")
