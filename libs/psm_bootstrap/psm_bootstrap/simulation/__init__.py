"""Monte Carlo harness comparing bootstrap standard errors."""

from .monte_carlo import (
    MonteCarloHarness,
    ScenarioResult,
    SimulationConfig,
    TrueVariabilityResult,
    build_simulation_config,
    results_to_frame,
)

__all__ = [
    "MonteCarloHarness",
    "ScenarioResult",
    "SimulationConfig",
    "TrueVariabilityResult",
    "build_simulation_config",
    "results_to_frame",
]
