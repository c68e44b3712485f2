"""Deliberation query service.

Read-only projections over the stored deliberations: queue counts by
status, filtered lists, board health KPIs and the next-session agenda.
No query modifies an item.
"""

from __future__ import annotations

from datetime import datetime

from src.application.dtos.deliberation import (
    BoardHealthKpisDTO,
    DeliberationFilterDTO,
    KpiBucket,
)
from src.application.ports.deliberation_repository import (
    DeliberationRepositoryProtocol,
)
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.base import LoggingMixin
from src.config.deliberation_config import (
    DEFAULT_DELIBERATION_CONFIG,
    DeliberationConfig,
)
from src.domain.models.deliberation_item import (
    OPEN_STATUSES,
    DeliberationItem,
    DeliberationStatus,
)

SECONDS_PER_DAY = 86_400

NEXT_SESSION_STATUSES = frozenset(
    {DeliberationStatus.SUBMITTED, DeliberationStatus.IN_REVIEW}
)


def is_overdue(item: DeliberationItem, now: datetime) -> bool:
    """An open item whose due date has passed."""
    return (
        item.deliberation_status in OPEN_STATUSES
        and item.due_date is not None
        and item.due_date < now
    )


def resolution_days(item: DeliberationItem) -> float | None:
    """Days from submission (or creation) to resolution, if resolved."""
    if item.resolved_at is None:
        return None
    start = item.submitted_at or item.created_at
    return (item.resolved_at - start).total_seconds() / SECONDS_PER_DAY


class DeliberationQueryService(LoggingMixin):
    """Query service for the deliberation dashboard.

    Attributes:
        _repository: Aggregate storage.
        _time: Source of "now" for overdue and look-back buckets.
        _config: Engine configuration (resolved look-back window).
    """

    def __init__(
        self,
        repository: DeliberationRepositoryProtocol,
        time_authority: TimeAuthorityProtocol,
        config: DeliberationConfig | None = None,
    ) -> None:
        self._repository = repository
        self._time = time_authority
        self._config = config or DEFAULT_DELIBERATION_CONFIG
        self._init_logger()

    def _resolved_recently(self, item: DeliberationItem, now: datetime) -> bool:
        return (
            item.resolved_at is not None
            and now - item.resolved_at <= self._config.resolved_window
        )

    def _in_bucket(self, item: DeliberationItem, bucket: KpiBucket, now: datetime) -> bool:
        if bucket == KpiBucket.OPEN:
            return item.deliberation_status in OPEN_STATUSES
        if bucket == KpiBucket.IN_VOTING:
            return item.deliberation_status == DeliberationStatus.IN_VOTING
        if bucket == KpiBucket.OVERDUE:
            return is_overdue(item, now)
        if bucket == KpiBucket.RESOLVED_30D:
            return self._resolved_recently(item, now)
        return item.resolved_at is not None

    async def queue_counts(self) -> dict[DeliberationStatus, int]:
        """Count items per status; every status is present, zero or not."""
        counts = {status: 0 for status in DeliberationStatus}
        for item in await self._repository.list_all():
            counts[item.deliberation_status] += 1
        return counts

    async def list_deliberations(
        self, filters: DeliberationFilterDTO | None = None
    ) -> list[DeliberationItem]:
        """List items matching a filter.

        A KPI bucket replaces the status filter; the committee and search
        filters apply on top of either.

        Args:
            filters: Filter to apply. None lists everything.

        Returns:
            Matching items in repository order.
        """
        filters = filters or DeliberationFilterDTO()
        now = self._time.now()
        items = await self._repository.list_all()

        if filters.kpi is not None:
            items = [i for i in items if self._in_bucket(i, filters.kpi, now)]
        elif filters.status is not None:
            items = [i for i in items if i.deliberation_status == filters.status]

        if filters.committee_id:
            items = [i for i in items if i.owner_committee_id == filters.committee_id]

        if filters.search:
            term = filters.search.lower()
            items = [
                i
                for i in items
                if term in i.title.lower() or term in i.description.lower()
            ]

        self._log_operation(
            "list_deliberations",
            status=filters.status.value if filters.status else None,
            kpi=filters.kpi.value if filters.kpi else None,
        ).debug("deliberations_listed", count=len(items))
        return items

    async def average_resolution_days(self) -> float | None:
        """Mean submit-to-resolution time in days, or None if nothing resolved."""
        durations = [
            days
            for days in map(resolution_days, await self._repository.list_all())
            if days is not None
        ]
        if not durations:
            return None
        return round(sum(durations) / len(durations), 1)

    async def board_health_kpis(self) -> BoardHealthKpisDTO:
        """Compute the board health panel figures."""
        now = self._time.now()
        items = await self._repository.list_all()
        return BoardHealthKpisDTO(
            open_count=sum(1 for i in items if self._in_bucket(i, KpiBucket.OPEN, now)),
            in_voting_count=sum(
                1 for i in items if self._in_bucket(i, KpiBucket.IN_VOTING, now)
            ),
            overdue_count=sum(1 for i in items if is_overdue(i, now)),
            resolved_recently_count=sum(
                1 for i in items if self._resolved_recently(i, now)
            ),
            average_resolution_days=await self.average_resolution_days(),
        )

    async def next_session_items(self, limit: int = 3) -> list[DeliberationItem]:
        """Items awaiting the next committee session, earliest due first.

        Items without a due date sort last.
        """
        candidates = [
            i
            for i in await self._repository.list_all()
            if i.deliberation_status in NEXT_SESSION_STATUSES
        ]
        candidates.sort(key=lambda i: (i.due_date is None, i.due_date or i.created_at))
        return candidates[:limit]
