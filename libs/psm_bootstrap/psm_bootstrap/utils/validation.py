"""Validation utilities shared by the generator, matcher and harness.

This module provides common validation functions used across different stages.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from ..core.base import SCENARIOS, DataValidationError, InvalidConfiguration


def validate_positive_int(value: Any, name: str) -> int:
    """Validate a count parameter such as ``n`` or ``R``.

    Raises:
        InvalidConfiguration: If the value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidConfiguration(f"{name} must be positive, got {value}")
    return int(value)


def validate_scenario(scenario: str) -> str:
    """Validate the scenario tag.

    Raises:
        InvalidConfiguration: If the scenario is not 'continuous' or 'binary'
    """
    if scenario not in SCENARIOS:
        raise InvalidConfiguration(
            f"Unknown scenario {scenario!r}. Expected one of {SCENARIOS}."
        )
    return scenario


def validate_propensity_scores(
    propensity: NDArray[Any],
    n_observations: int,
) -> NDArray[np.float64]:
    """Validate propensity scores attached to a dataset.

    Args:
        propensity: Propensity score array
        n_observations: Number of rows the scores must cover

    Returns:
        Scores as a float array

    Raises:
        DataValidationError: If scores are misaligned, non-finite or outside [0, 1]
    """
    scores = np.asarray(propensity, dtype=float)

    if scores.ndim != 1 or len(scores) != n_observations:
        raise DataValidationError(
            f"Expected {n_observations} propensity scores, got shape {scores.shape}."
        )

    if not np.all(np.isfinite(scores)):
        raise DataValidationError("Propensity scores contain NaN or infinite values.")

    if np.any((scores < 0) | (scores > 1)):
        raise DataValidationError("Propensity scores must be between 0 and 1.")

    return scores


def check_common_support(
    propensity: NDArray[Any],
    treatment: NDArray[Any],
    threshold: float = 0.1,
) -> bool:
    """Check for common support between treatment groups.

    Args:
        propensity: Propensity scores
        treatment: Binary treatment indicator
        threshold: Minimum share of each group inside the overlap region

    Returns:
        True if there is adequate common support
    """
    treated_props = propensity[treatment == 1]
    control_props = propensity[treatment == 0]

    if len(treated_props) == 0 or len(control_props) == 0:
        return False

    overlap_min = max(np.min(treated_props), np.min(control_props))
    overlap_max = min(np.max(treated_props), np.max(control_props))

    if overlap_min >= overlap_max:
        return False

    treated_in_overlap = np.mean(
        (treated_props >= overlap_min) & (treated_props <= overlap_max)
    )
    control_in_overlap = np.mean(
        (control_props >= overlap_min) & (control_props <= overlap_max)
    )

    return bool(treated_in_overlap >= threshold and control_in_overlap >= threshold)
