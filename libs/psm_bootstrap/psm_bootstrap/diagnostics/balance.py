"""Covariate balance and matching diagnostics.

Standardized mean differences before and after matching, plus summary
statistics of the matched pairs' propensity-score distances.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from ..core.base import MatchedDataset
from ..utils.validation import check_common_support


@dataclass
class BalanceResults:
    """Results from covariate balance assessment."""

    smd_before: dict[str, float]
    smd_after: dict[str, float]
    balance_threshold: float
    imbalanced_covariates: list[str]
    overall_balance_met: bool
    sample_sizes: dict[str, int]

    def to_frame(self) -> pd.DataFrame:
        """Balance table with one row per covariate."""
        return pd.DataFrame(
            {
                "smd_before": pd.Series(self.smd_before),
                "smd_after": pd.Series(self.smd_after),
            }
        ).assign(balanced=lambda df: df["smd_after"].abs() <= self.balance_threshold)


def calculate_standardized_mean_difference(
    covariate_values: Union[NDArray[Any], pd.Series],
    treatment_values: Union[NDArray[Any], pd.Series],
) -> float:
    """Calculate standardized mean difference (SMD) for a covariate.

    SMD = (mean_treated - mean_control) / sqrt((var_treated + var_control) / 2)

    Returns NaN when either group is empty and 0.0 when both variances are 0.
    """
    covariate_values = np.asarray(covariate_values, dtype=float)
    treatment_values = np.asarray(treatment_values)

    treated_values = covariate_values[treatment_values == 1]
    control_values = covariate_values[treatment_values == 0]

    if len(treated_values) == 0 or len(control_values) == 0:
        return np.nan

    var_treated = np.var(treated_values, ddof=1) if len(treated_values) > 1 else 0
    var_control = np.var(control_values, ddof=1) if len(control_values) > 1 else 0
    pooled_std = np.sqrt((var_treated + var_control) / 2)

    if pooled_std == 0:
        return 0.0

    return float((np.mean(treated_values) - np.mean(control_values)) / pooled_std)


def assess_matched_balance(
    matched: MatchedDataset, balance_threshold: float = 0.1
) -> BalanceResults:
    """Compare covariate SMDs in the full sample and in the matched sample."""
    source = matched.source
    covariates = source.covariate_matrix
    treatment = source.treatment_values
    names = source.covariate_names

    matched_rows = np.concatenate([matched.treated_indices, matched.control_indices])
    matched_treatment = treatment[matched_rows]

    smd_before = {}
    smd_after = {}
    for j, name in enumerate(names):
        smd_before[name] = calculate_standardized_mean_difference(
            covariates[:, j], treatment
        )
        smd_after[name] = calculate_standardized_mean_difference(
            covariates[matched_rows, j], matched_treatment
        )

    # NaN (empty group) counts as imbalanced
    imbalanced = [
        name for name, smd in smd_after.items() if not abs(smd) <= balance_threshold
    ]

    return BalanceResults(
        smd_before=smd_before,
        smd_after=smd_after,
        balance_threshold=balance_threshold,
        imbalanced_covariates=imbalanced,
        overall_balance_met=len(imbalanced) == 0,
        sample_sizes={
            "treated": source.n_treated,
            "control": source.n_control,
            "matched_pairs": matched.n_pairs,
        },
    )


def matching_diagnostics(matched: MatchedDataset) -> dict[str, Any]:
    """Match rate and propensity-distance summary for a matched dataset."""
    total_treated = matched.source.n_treated
    distances = matched.distances

    return {
        "match_rate": matched.n_pairs / total_treated if total_treated > 0 else 0.0,
        "n_matched_pairs": matched.n_pairs,
        "n_unmatched_treated": matched.n_unmatched_treated,
        "total_treated": total_treated,
        "total_control": matched.source.n_control,
        "average_distance": float(np.mean(distances)) if len(distances) else 0.0,
        "max_distance": float(np.max(distances)) if len(distances) else 0.0,
        "min_distance": float(np.min(distances)) if len(distances) else 0.0,
        "common_support": check_common_support(
            matched.propensity_scores, matched.source.treatment_values
        ),
    }
