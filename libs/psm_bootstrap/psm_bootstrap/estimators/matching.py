"""Greedy 1:1 nearest-neighbor propensity-score matching without replacement.

Treated units are visited one at a time. Each takes the unconsumed control
with the smallest absolute propensity-score distance (lowest row index on
ties) and that control leaves the pool. Once the pool is empty the remaining
treated units are dropped and counted. The result depends on the visiting
order and is not a globally optimal assignment.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

import numpy as np
from numpy.typing import NDArray

from ..core.base import Dataset, InvalidConfiguration, MatchedDataset
from ..utils.random import RandomState, as_generator
from ..utils.validation import validate_propensity_scores

logger = logging.getLogger(__name__)

MatchOrder = Literal["data", "random"]
MATCH_ORDERS: tuple[str, ...] = ("data", "random")


class NearestNeighborMatcher:
    """1:1 greedy nearest-neighbor matcher on the propensity score.

    Args:
        match_order: 'data' visits treated units in row order; 'random'
            visits them in a permutation drawn from the generator passed
            to ``match``
    """

    def __init__(self, match_order: MatchOrder = "data") -> None:
        if match_order not in MATCH_ORDERS:
            raise InvalidConfiguration(
                f"Unknown match_order {match_order!r}. Expected one of {MATCH_ORDERS}."
            )
        self.match_order = match_order

    def processing_order(
        self, treated_rows: NDArray[np.int_], rng: RandomState = None
    ) -> NDArray[np.int_]:
        """Order in which treated rows are matched."""
        if self.match_order == "random":
            return as_generator(rng).permutation(treated_rows)
        return treated_rows

    def match(
        self,
        dataset: Dataset,
        propensity_scores: NDArray[Any],
        rng: RandomState = None,
    ) -> MatchedDataset:
        """Match every treated row to its nearest still-available control.

        Args:
            dataset: Rows to match
            propensity_scores: One score per row of ``dataset``
            rng: Generator for the 'random' processing order (unused for 'data')

        Returns:
            MatchedDataset with pairs in processing order

        Raises:
            DataValidationError: If the scores do not line up with the rows
        """
        scores = validate_propensity_scores(propensity_scores, dataset.n_observations)
        treatment = dataset.treatment_values

        treated_rows = np.flatnonzero(treatment == 1)
        control_rows = np.flatnonzero(treatment == 0)
        order = self.processing_order(treated_rows, rng)

        control_scores = scores[control_rows]
        available = np.ones(len(control_rows), dtype=bool)
        n_available = len(control_rows)
        pairs: list[tuple[int, int]] = []

        for treated_row in order:
            if n_available == 0:
                break

            distances = np.where(
                available, np.abs(control_scores - scores[treated_row]), np.inf
            )
            # argmin returns the first minimum, i.e. the lowest control row
            best = int(np.argmin(distances))
            available[best] = False
            n_available -= 1
            pairs.append((int(treated_row), int(control_rows[best])))

        n_unmatched = len(order) - len(pairs)
        if n_unmatched > 0:
            logger.debug(
                "Control pool exhausted: %d of %d treated units left unmatched",
                n_unmatched,
                len(order),
            )

        return MatchedDataset(
            source=dataset,
            propensity_scores=scores,
            pairs=np.array(pairs, dtype=int).reshape(-1, 2),
            n_unmatched_treated=n_unmatched,
        )


def match_nearest_neighbor(
    dataset: Dataset,
    propensity_scores: NDArray[Any],
    match_order: MatchOrder = "data",
    rng: RandomState = None,
) -> MatchedDataset:
    """Match a dataset with a fresh matcher (convenience function)."""
    return NearestNeighborMatcher(match_order=match_order).match(
        dataset, propensity_scores, rng=rng
    )
