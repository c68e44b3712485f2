"""Deliberation engine configuration.

This module defines the tunables of the deliberation workflow engine with
environment variable overrides for production tuning.

Environment Variables:
- DELIBERATION_VOTER_POPULATION: Voters assumed for a committee the directory
  does not know (default: 5, min: 1, max: 500)
- DELIBERATION_EXECUTION_DUE_DAYS: Days until a follow-up task is due when no
  due date is given (default: 7, min: 1, max: 365)
- DELIBERATION_RESOLVED_WINDOW_DAYS: Look-back of the "resolved recently"
  KPI bucket (default: 30, min: 1, max: 365)
- DELIBERATION_STRICT_TRANSITIONS: Raise InvalidTransitionError instead of
  returning the item unchanged (default: false)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta

from src.domain.models.committee import DEFAULT_VOTER_POPULATION
from src.domain.models.execution_item import DEFAULT_EXECUTION_DUE_DAYS


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable with default.

    Accepts 1/true/yes/on (case-insensitive) as True and
    0/false/no/off as False; anything else yields the default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    return default


# =============================================================================
# Voter Population
# =============================================================================

MIN_VOTER_POPULATION = 1
MAX_VOTER_POPULATION = 500

# =============================================================================
# Execution Tasks
# =============================================================================

MIN_EXECUTION_DUE_DAYS = 1
MAX_EXECUTION_DUE_DAYS = 365

# =============================================================================
# Query KPIs
# =============================================================================

DEFAULT_RESOLVED_WINDOW_DAYS = 30
MIN_RESOLVED_WINDOW_DAYS = 1
MAX_RESOLVED_WINDOW_DAYS = 365


@dataclass(frozen=True)
class DeliberationConfig:
    """Configuration for the deliberation workflow engine.

    All values can be overridden via environment variables for production tuning.

    Attributes:
        voter_population: Expected voters for committees missing from the
                          directory. Default: 5.
        execution_due_days: Default due offset for follow-up tasks.
                            Default: 7 days.
        resolved_window_days: Look-back for the resolved KPI bucket.
                              Default: 30 days.
        strict_transitions: Raise on invalid transitions instead of
                            returning the item unchanged. Default: False.
    """

    voter_population: int = DEFAULT_VOTER_POPULATION
    execution_due_days: int = DEFAULT_EXECUTION_DUE_DAYS
    resolved_window_days: int = DEFAULT_RESOLVED_WINDOW_DAYS
    strict_transitions: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not MIN_VOTER_POPULATION <= self.voter_population <= MAX_VOTER_POPULATION:
            raise ValueError(
                f"voter_population must be between {MIN_VOTER_POPULATION} "
                f"and {MAX_VOTER_POPULATION}, got {self.voter_population}"
            )
        if not MIN_EXECUTION_DUE_DAYS <= self.execution_due_days <= MAX_EXECUTION_DUE_DAYS:
            raise ValueError(
                f"execution_due_days must be between {MIN_EXECUTION_DUE_DAYS} "
                f"and {MAX_EXECUTION_DUE_DAYS}, got {self.execution_due_days}"
            )
        if (
            not MIN_RESOLVED_WINDOW_DAYS
            <= self.resolved_window_days
            <= MAX_RESOLVED_WINDOW_DAYS
        ):
            raise ValueError(
                f"resolved_window_days must be between {MIN_RESOLVED_WINDOW_DAYS} "
                f"and {MAX_RESOLVED_WINDOW_DAYS}, got {self.resolved_window_days}"
            )

    @property
    def resolved_window(self) -> timedelta:
        """Resolved KPI look-back as a timedelta."""
        return timedelta(days=self.resolved_window_days)

    @classmethod
    def from_environment(cls) -> DeliberationConfig:
        """Create config from environment variables with defaults.

        Out-of-range integers are clamped to the valid range.

        Returns:
            DeliberationConfig with values from environment or defaults.
        """
        population = _get_int_env(
            "DELIBERATION_VOTER_POPULATION",
            DEFAULT_VOTER_POPULATION,
        )
        # Clamp to valid range
        population = max(MIN_VOTER_POPULATION, min(population, MAX_VOTER_POPULATION))

        due_days = _get_int_env(
            "DELIBERATION_EXECUTION_DUE_DAYS",
            DEFAULT_EXECUTION_DUE_DAYS,
        )
        due_days = max(MIN_EXECUTION_DUE_DAYS, min(due_days, MAX_EXECUTION_DUE_DAYS))

        window_days = _get_int_env(
            "DELIBERATION_RESOLVED_WINDOW_DAYS",
            DEFAULT_RESOLVED_WINDOW_DAYS,
        )
        window_days = max(
            MIN_RESOLVED_WINDOW_DAYS,
            min(window_days, MAX_RESOLVED_WINDOW_DAYS),
        )

        return cls(
            voter_population=population,
            execution_due_days=due_days,
            resolved_window_days=window_days,
            strict_transitions=_get_bool_env("DELIBERATION_STRICT_TRANSITIONS", False),
        )


# Pre-defined configurations for common use cases

# Default production config (lenient transitions)
DEFAULT_DELIBERATION_CONFIG = DeliberationConfig()

# Testing config, identical defaults but spelled out for readability in tests
TEST_DELIBERATION_CONFIG = DeliberationConfig(
    voter_population=DEFAULT_VOTER_POPULATION,
    execution_due_days=DEFAULT_EXECUTION_DUE_DAYS,
    resolved_window_days=DEFAULT_RESOLVED_WINDOW_DAYS,
    strict_transitions=False,
)

# Strict config raising InvalidTransitionError on misuse
STRICT_DELIBERATION_CONFIG = DeliberationConfig(strict_transitions=True)
