"""Balance and matching diagnostics."""

from .balance import (
    BalanceResults,
    assess_matched_balance,
    calculate_standardized_mean_difference,
    matching_diagnostics,
)

__all__ = [
    "BalanceResults",
    "assess_matched_balance",
    "calculate_standardized_mean_difference",
    "matching_diagnostics",
]
