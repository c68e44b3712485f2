"""Structured logging for deliberation application services.

Services bind one logger per instance (service name and component) and
derive a per-command logger carrying the operation, the item id and the
request's correlation id. Every command ends with exactly one outcome
event, applied or not applied, so a log search for an item id shows the
whole history of commands against it.
"""

from __future__ import annotations

import structlog

from src.domain.models.deliberation_item import DeliberationItem
from src.infrastructure.observability.correlation import get_correlation_id


class LoggingMixin:
    """Mixin giving a service its bound structlog logger.

    Call _init_logger() at the end of __init__.
    """

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = "deliberation") -> None:
        self._log = structlog.get_logger().bind(
            service=type(self).__name__,
            component=component,
        )

    def _log_operation(self, operation: str, **context: object) -> structlog.BoundLogger:
        """Logger for one command or query.

        Args:
            operation: Service method name, e.g. "close_voting".
            **context: Extra fields (item_id, task_id, ...).
        """
        return self._log.bind(
            operation=operation,
            correlation_id=get_correlation_id(),
            **context,
        )

    @staticmethod
    def _log_outcome(
        log: structlog.BoundLogger,
        before: DeliberationItem,
        after: DeliberationItem,
    ) -> None:
        """Emit the outcome event of a command.

        A command whose transition was refused returns the very same item
        instance; anything else was applied and stored.
        """
        if after is before:
            log.info("command_not_applied", status=before.deliberation_status.value)
            return
        log.info(
            "command_applied",
            previous_status=before.deliberation_status.value,
            status=after.deliberation_status.value,
            audit_entries=len(after.audit_trail) - len(before.audit_trail),
        )
