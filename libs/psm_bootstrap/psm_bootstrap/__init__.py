"""Propensity score matching bootstrap study.

Monte Carlo comparison of simple (pair resampling) and complex (row
resampling with propensity refit) bootstrap standard errors for 1:1 greedy
nearest-neighbor propensity score matching.
"""

__version__ = "0.1.0"

from .core import *
from .data import SyntheticDataGenerator, generate_dataset
from .diagnostics import BalanceResults, assess_matched_balance, matching_diagnostics
from .estimators import (
    ComplexBootstrap,
    LogisticPropensityModel,
    MatchingPipeline,
    NearestNeighborMatcher,
    PropensityScoreMatchingEstimator,
    SimpleBootstrap,
    estimate_effect,
)
from .simulation import (
    MonteCarloHarness,
    ScenarioResult,
    SimulationConfig,
    build_simulation_config,
    results_to_frame,
)

__all__ = [
    "__version__",
    "BalanceResults",
    "ComplexBootstrap",
    "LogisticPropensityModel",
    "MatchingPipeline",
    "MonteCarloHarness",
    "NearestNeighborMatcher",
    "PropensityScoreMatchingEstimator",
    "ScenarioResult",
    "SimpleBootstrap",
    "SimulationConfig",
    "SyntheticDataGenerator",
    "assess_matched_balance",
    "build_simulation_config",
    "estimate_effect",
    "generate_dataset",
    "matching_diagnostics",
    "results_to_frame",
]
