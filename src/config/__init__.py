"""Configuration module for the deliberation engine.

This module provides centralized configuration for the workflow engine.

Available Configurations:
- DeliberationConfig: Voter population, task due dates, KPI window, strictness
"""

from src.config.deliberation_config import (
    DEFAULT_DELIBERATION_CONFIG,
    STRICT_DELIBERATION_CONFIG,
    TEST_DELIBERATION_CONFIG,
    DeliberationConfig,
)

__all__ = [
    "DeliberationConfig",
    "DEFAULT_DELIBERATION_CONFIG",
    "TEST_DELIBERATION_CONFIG",
    "STRICT_DELIBERATION_CONFIG",
]
