"""Treatment-effect estimation on a matched sample."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from ..core.base import SCENARIOS, EmptyGroupError, InvalidConfiguration, MatchedDataset


def estimate_from_pairs(
    treated_outcomes: NDArray[Any], control_outcomes: NDArray[Any]
) -> float:
    """Difference between the treated and control outcome means.

    For binary outcomes this is the difference in proportions.

    Raises:
        EmptyGroupError: If either group is empty
    """
    if len(treated_outcomes) == 0 or len(control_outcomes) == 0:
        raise EmptyGroupError(
            f"Matched sample has {len(treated_outcomes)} treated and "
            f"{len(control_outcomes)} control rows; both groups are required."
        )
    return float(np.mean(treated_outcomes) - np.mean(control_outcomes))


def estimate_effect(matched: MatchedDataset, outcome_type: str | None = None) -> float:
    """Estimate the treatment effect from a matched dataset.

    Computes ``mean(Y | T=1) - mean(Y | T=0)`` over the matched rows. Rows
    repeated by pair resampling count once per repetition.

    Args:
        matched: Matched dataset
        outcome_type: 'continuous' (mean difference) or 'binary' (proportion
            difference); defaults to the source dataset's outcome type

    Returns:
        Effect estimate

    Raises:
        EmptyGroupError: If the matched sample has no treated or no control rows
    """
    outcome_type = outcome_type or matched.outcome_type
    if outcome_type not in SCENARIOS:
        raise InvalidConfiguration(f"Unknown outcome type: {outcome_type!r}")

    return estimate_from_pairs(matched.treated_outcomes, matched.control_outcomes)
