"""Application services - Use case orchestration.

This module contains application services that orchestrate domain
operations and coordinate with infrastructure adapters.

Available services:
- DeliberationService: Command surface of the workflow engine
- DeliberationQueryService: Queue counts, filtered lists and KPIs
"""

from src.application.services.deliberation_query_service import (
    DeliberationQueryService,
)
from src.application.services.deliberation_service import DeliberationService

__all__: list[str] = [
    "DeliberationQueryService",
    "DeliberationService",
]
