"""Domain services for the deliberation engine.

Domain services contain business logic that doesn't naturally fit in entities
or value objects. They coordinate domain operations and enforce invariants.

Constraints:
- Domain services must NOT depend on infrastructure
- Domain services never read a clock; time is passed in

Available services:
- build_stage_plan: Table-driven routing policy
- evaluate_vote_result: Quorum and majority evaluation
- DeliberationStateMachine: Lifecycle transitions and audit trail
- generate_minutes: Resolution minutes rendering
- create_execution_task: Follow-up task creation
"""

from src.domain.services.deliberation_state_machine import DeliberationStateMachine
from src.domain.services.execution_task_tracker import create_execution_task
from src.domain.services.minutes_generator import MinutesDraft, generate_minutes
from src.domain.services.stage_plan_builder import RoutingInput, build_stage_plan
from src.domain.services.vote_outcome_evaluator import (
    VoteOutcome,
    evaluate_vote_result,
)

__all__ = [
    "DeliberationStateMachine",
    "MinutesDraft",
    "RoutingInput",
    "VoteOutcome",
    "build_stage_plan",
    "create_execution_task",
    "evaluate_vote_result",
    "generate_minutes",
]
