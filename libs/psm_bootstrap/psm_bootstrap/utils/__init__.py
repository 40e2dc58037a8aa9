"""Validation and random stream utilities."""

from .random import as_generator, as_seed_sequence, spawn_seeds
from .validation import (
    check_common_support,
    validate_positive_int,
    validate_propensity_scores,
    validate_scenario,
)

__all__ = [
    "as_generator",
    "as_seed_sequence",
    "spawn_seeds",
    "check_common_support",
    "validate_positive_int",
    "validate_propensity_scores",
    "validate_scenario",
]
