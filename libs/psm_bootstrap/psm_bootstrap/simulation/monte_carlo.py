"""Monte Carlo comparison of simple and complex bootstrap standard errors.

For each scenario the harness computes three numbers:

true variability
    Standard deviation of the matched effect estimate across
    ``number_of_simulations`` independently generated datasets.

simple bootstrap SE
    Pair-resampling bootstrap on one realized matched dataset.

complex bootstrap SE
    Row-resampling bootstrap with propensity refit and rematching on the
    same realized dataset.

Classes:
    SimulationConfig: Study settings (n, simulations, R, seed, scenarios)
    TrueVariabilityResult: Monte Carlo reference distribution
    ScenarioResult: Structured record of one scenario
    MonteCarloHarness: Runs the study

Functions:
    build_simulation_config: Build a SimulationConfig, failing early
    results_to_frame: Tabulate scenario results
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING, Any, Optional

import numpy as np
import pandas as pd
from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from ..core.base import SCENARIOS, InvalidConfiguration, empty_failure_counts
from ..core.bootstrap import (
    BootstrapConfig,
    BootstrapResult,
    ReplicateOutcome,
    run_guarded,
    run_replicates,
    summarize_replicates,
    validate_replicate_count,
)
from ..data.synthetic import SyntheticDataGenerator
from ..estimators.bootstrap import ComplexBootstrap, SimpleBootstrap
from ..estimators.effect import estimate_effect
from ..estimators.matching import MATCH_ORDERS
from ..estimators.pipeline import MatchingPipeline
from ..utils.validation import validate_scenario

if TYPE_CHECKING:
    from shared.config import SimulationSettings
    from shared.observability import SimulationMetrics

__all__ = [
    "MonteCarloHarness",
    "ScenarioResult",
    "SimulationConfig",
    "TrueVariabilityResult",
    "build_simulation_config",
    "results_to_frame",
]

logger = logging.getLogger(__name__)

# Per-scenario stream order
_STREAM_SIMULATIONS = 0
_STREAM_REALIZED = 1
_STREAM_SIMPLE = 2
_STREAM_COMPLEX = 3
_N_STREAMS = 4


class SimulationConfig(BaseModel):
    """Settings for one simulation study.

    Attributes:
        sample_size: Observations per generated dataset (n)
        number_of_simulations: Datasets used for the true variability
        n_bootstrap: Bootstrap replications per method (R)
        random_state: Root seed; every stream in the study derives from it
        scenarios: Scenarios run by ``run_all``
        match_order: Treated processing order for matching
        noise_std: Standard deviation of the outcome noise term
        n_jobs: joblib workers for simulations and bootstrap replicates
    """

    sample_size: int = Field(default=1000, gt=0, description="Observations per dataset")
    number_of_simulations: int = Field(default=1000, description="Monte Carlo datasets")
    n_bootstrap: int = Field(default=1000, description="Bootstrap replications R")
    random_state: int = Field(default=42, ge=0, description="Root seed")
    scenarios: tuple[str, ...] = Field(default=SCENARIOS, description="Scenarios to run")
    match_order: str = Field(default="data", description="'data' or 'random'")
    noise_std: float = Field(default=1.0, ge=0.0, description="Outcome noise SD")
    n_jobs: int = Field(default=1, description="Parallel workers (-1 for all cores)")

    model_config = {"frozen": True}

    @field_validator("number_of_simulations", "n_bootstrap")
    @classmethod
    def validate_replicates(cls, v: int, info: ValidationInfo) -> int:
        """Validate each count leaves a defined standard deviation."""
        return validate_replicate_count(v, info.field_name)

    @field_validator("scenarios")
    @classmethod
    def validate_scenarios(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Validate every scenario is known and the list is not empty."""
        if len(v) == 0:
            raise ValueError("At least one scenario is required")
        unknown = [s for s in v if s not in SCENARIOS]
        if unknown:
            raise ValueError(f"Unknown scenarios {unknown}. Expected any of {SCENARIOS}")
        return v

    @field_validator("match_order")
    @classmethod
    def validate_match_order(cls, v: str) -> str:
        """Validate the matching order."""
        if v not in MATCH_ORDERS:
            raise ValueError(f"match_order must be one of {MATCH_ORDERS}")
        return v

    @field_validator("n_jobs")
    @classmethod
    def validate_n_jobs(cls, v: int) -> int:
        """Validate n_jobs is positive or -1."""
        if v == 0 or v < -1:
            raise ValueError("n_jobs must be a positive integer or -1")
        return v

    @classmethod
    def from_settings(
        cls, settings: Optional[SimulationSettings] = None, **overrides: Any
    ) -> SimulationConfig:
        """Build a config from environment-driven settings.

        Raises:
            InvalidConfiguration: If the combined values are invalid
        """
        if settings is None:
            from shared.config import SimulationSettings

            settings = SimulationSettings()

        values = {
            "sample_size": settings.sample_size,
            "number_of_simulations": settings.number_of_simulations,
            "n_bootstrap": settings.n_bootstrap,
            "random_state": settings.random_state,
            "match_order": settings.match_order,
            "n_jobs": settings.n_jobs,
        }
        values.update(overrides)
        return build_simulation_config(**values)

    def bootstrap_config(self) -> BootstrapConfig:
        """Bootstrap settings shared by both methods."""
        return BootstrapConfig(n_samples=self.n_bootstrap, n_jobs=self.n_jobs)


def build_simulation_config(**kwargs: Any) -> SimulationConfig:
    """Build a SimulationConfig, reporting bad values as InvalidConfiguration."""
    try:
        return SimulationConfig(**kwargs)
    except ValidationError as e:
        raise InvalidConfiguration(f"Invalid simulation configuration: {e}") from e


@dataclass(frozen=True)
class TrueVariabilityResult:
    """Monte Carlo distribution of the matched effect estimate."""

    scenario: str
    estimates: tuple[float, ...]
    standard_deviation: float
    n_requested: int
    skipped: dict[str, int] = field(default_factory=empty_failure_counts)

    @property
    def mean_effect(self) -> float:
        return float(np.mean(self.estimates))

    @property
    def n_successful(self) -> int:
        return len(self.estimates)

    @property
    def n_skipped(self) -> int:
        return sum(self.skipped.values())


@dataclass(frozen=True)
class ScenarioResult:
    """Structured record of one scenario of the study.

    Attributes:
        scenario: 'continuous' or 'binary'
        true_variability: SD of the estimate across Monte Carlo datasets
        simple_bootstrap_se: Pair-resampling bootstrap SE
        complex_bootstrap_se: Row-resampling bootstrap SE with refit
        number_of_simulations: Monte Carlo datasets requested
        n_bootstrap: Bootstrap replications requested per method
        sample_size: Observations per dataset
        random_state: Root seed of the study
        mean_effect: Mean estimate across Monte Carlo datasets
        realized_effect: Estimate on the realized dataset
        simulation_skipped: Skipped simulations by failure kind
        simple_skipped: Skipped simple replicates by failure kind
        complex_skipped: Skipped complex replicates by failure kind
    """

    scenario: str
    true_variability: float
    simple_bootstrap_se: float
    complex_bootstrap_se: float
    number_of_simulations: int
    n_bootstrap: int
    sample_size: int
    random_state: int
    mean_effect: float
    realized_effect: float
    simulation_skipped: dict[str, int] = field(default_factory=empty_failure_counts)
    simple_skipped: dict[str, int] = field(default_factory=empty_failure_counts)
    complex_skipped: dict[str, int] = field(default_factory=empty_failure_counts)

    def to_dict(self) -> dict[str, Any]:
        """Reporting record for this scenario."""
        return {
            "scenario": self.scenario,
            "true_variability": self.true_variability,
            "simple_bootstrap_se": self.simple_bootstrap_se,
            "complex_bootstrap_se": self.complex_bootstrap_se,
            "number_of_simulations": self.number_of_simulations,
            "n_bootstrap": self.n_bootstrap,
            "sample_size": self.sample_size,
            "random_state": self.random_state,
            "mean_effect": self.mean_effect,
            "realized_effect": self.realized_effect,
            "simulation_skipped": dict(self.simulation_skipped),
            "simple_skipped": dict(self.simple_skipped),
            "complex_skipped": dict(self.complex_skipped),
        }


def _simulate_once(
    generator: SyntheticDataGenerator,
    pipeline: MatchingPipeline,
    sample_size: int,
    scenario: str,
    seed: np.random.SeedSequence,
) -> ReplicateOutcome:
    rng = np.random.default_rng(seed)
    dataset = generator.generate(sample_size, scenario, rng=rng)
    return run_guarded(
        lambda: pipeline.estimate(dataset, rng=rng), label="Monte Carlo simulation"
    )


class MonteCarloHarness:
    """Compares bootstrap standard errors with Monte Carlo variability.

    Args:
        config: Study settings; defaults to ``SimulationConfig()``
        metrics: Optional collector that receives replicate counts, stage
            durations and standard errors
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        metrics: Optional[SimulationMetrics] = None,
    ):
        self.config = config if config is not None else build_simulation_config()
        self.metrics = metrics
        self.generator = SyntheticDataGenerator(noise_std=self.config.noise_std)
        self.pipeline = MatchingPipeline(match_order=self.config.match_order)

    def _streams(self, scenario: str) -> list[np.random.SeedSequence]:
        """Fresh seed streams for a scenario: simulations, realized, simple, complex."""
        validate_scenario(scenario)
        root = np.random.SeedSequence(self.config.random_state)
        scenario_seed = root.spawn(len(SCENARIOS))[SCENARIOS.index(scenario)]
        return scenario_seed.spawn(_N_STREAMS)

    @contextmanager
    def _stage(self, stage: str, scenario: str) -> Iterator[None]:
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            logger.info("%s stage for %s scenario took %.2fs", stage, scenario, duration)
            if self.metrics is not None:
                self.metrics.record_stage(stage, scenario, duration)

    def _record(self, method: str, n_successful: int, skipped: dict[str, int]) -> None:
        if self.metrics is None:
            return
        self.metrics.record_replicates(method, "ok", n_successful)
        for kind, count in skipped.items():
            self.metrics.record_replicates(method, kind, count)

    def true_variability(self, scenario: str) -> TrueVariabilityResult:
        """Standard deviation of the estimate across independent datasets.

        Raises:
            InvalidConfiguration: If the scenario is unknown
            InsufficientReplicatesError: If fewer than two simulations succeed
        """
        seeds = self._streams(scenario)[_STREAM_SIMULATIONS].spawn(
            self.config.number_of_simulations
        )
        logger.info(
            "Running %d Monte Carlo simulations (%s, n=%d)",
            self.config.number_of_simulations,
            scenario,
            self.config.sample_size,
        )

        with self._stage("true_variability", scenario):
            outcomes = run_replicates(
                partial(
                    _simulate_once,
                    self.generator,
                    self.pipeline,
                    self.config.sample_size,
                    scenario,
                ),
                seeds,
                n_jobs=self.config.n_jobs,
            )
            summary = summarize_replicates(outcomes, label=f"{scenario} simulations")

        self._record("monte_carlo", summary.n_successful, summary.skipped)
        return TrueVariabilityResult(
            scenario=scenario,
            estimates=summary.estimates,
            standard_deviation=summary.standard_deviation,
            n_requested=len(outcomes),
            skipped=summary.skipped,
        )

    def bootstrap_comparison(
        self, scenario: str
    ) -> tuple[float, BootstrapResult, BootstrapResult]:
        """Run both bootstraps on one realized dataset.

        Returns:
            Realized effect estimate, simple bootstrap result, complex
            bootstrap result

        Raises:
            InvalidConfiguration: If the scenario is unknown
            ModelFitFailure: If the realized dataset cannot be fitted
            EmptyGroupError: If the realized matched sample has an empty group
            InsufficientReplicatesError: If a bootstrap has fewer than two
                successful replicates
        """
        streams = self._streams(scenario)
        rng = np.random.default_rng(streams[_STREAM_REALIZED])
        dataset = self.generator.generate(self.config.sample_size, scenario, rng=rng)
        matched = self.pipeline.match(dataset, rng=rng)
        realized_effect = estimate_effect(matched)
        logger.info(
            "Realized %s dataset: %d pairs, effect %.4f",
            scenario,
            matched.n_pairs,
            realized_effect,
        )

        bootstrap_config = self.config.bootstrap_config()

        with self._stage("simple_bootstrap", scenario):
            simple = SimpleBootstrap(bootstrap_config).run(
                matched, rng=streams[_STREAM_SIMPLE]
            )
        self._record("simple", simple.n_successful, simple.skipped)

        with self._stage("complex_bootstrap", scenario):
            complex_ = ComplexBootstrap(
                bootstrap_config, match_order=self.config.match_order
            ).run(dataset, rng=streams[_STREAM_COMPLEX])
        self._record("complex", complex_.n_successful, complex_.skipped)

        return realized_effect, simple, complex_

    def run(self, scenario: str) -> ScenarioResult:
        """Run the full comparison for one scenario."""
        validate_scenario(scenario)
        truth = self.true_variability(scenario)
        realized_effect, simple, complex_ = self.bootstrap_comparison(scenario)

        if self.metrics is not None:
            self.metrics.record_standard_error(
                "monte_carlo", scenario, truth.standard_deviation
            )
            self.metrics.record_standard_error("simple", scenario, simple.standard_error)
            self.metrics.record_standard_error(
                "complex", scenario, complex_.standard_error
            )

        logger.info(
            "%s: true variability %.4f, simple SE %.4f, complex SE %.4f",
            scenario,
            truth.standard_deviation,
            simple.standard_error,
            complex_.standard_error,
        )

        return ScenarioResult(
            scenario=scenario,
            true_variability=truth.standard_deviation,
            simple_bootstrap_se=simple.standard_error,
            complex_bootstrap_se=complex_.standard_error,
            number_of_simulations=self.config.number_of_simulations,
            n_bootstrap=self.config.n_bootstrap,
            sample_size=self.config.sample_size,
            random_state=self.config.random_state,
            mean_effect=truth.mean_effect,
            realized_effect=realized_effect,
            simulation_skipped=truth.skipped,
            simple_skipped=simple.skipped,
            complex_skipped=complex_.skipped,
        )

    def run_all(self) -> dict[str, ScenarioResult]:
        """Run every configured scenario in order."""
        return {scenario: self.run(scenario) for scenario in self.config.scenarios}


def results_to_frame(results: dict[str, ScenarioResult]) -> pd.DataFrame:
    """Tabulate scenario results, one row per scenario."""
    rows = []
    for result in results.values():
        record = result.to_dict()
        for prefix in ("simulation", "simple", "complex"):
            record[f"{prefix}_skipped"] = sum(record[f"{prefix}_skipped"].values())
        rows.append(record)
    return pd.DataFrame(rows).set_index("scenario")
