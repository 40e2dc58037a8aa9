"""Simple and complex bootstrap standard errors for matched estimates.

Simple bootstrap
    Resamples matched pairs with replacement and recomputes the effect.
    Treats the propensity model and the matching as fixed.

Complex bootstrap
    Resamples raw rows with replacement, then refits the propensity model,
    rematches and re-estimates inside every replicate. Replicates whose
    propensity fit fails (degenerate resample) or whose matched sample has an
    empty group are skipped and counted.

Both return a ``BootstrapResult`` whose standard error is the sample
standard deviation (denominator R - 1) of the successful replicates.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any

import numpy as np

from ..core.base import Dataset, EmptyGroupError, MatchedDataset
from ..core.bootstrap import (
    BootstrapConfig,
    BootstrapResult,
    ReplicateOutcome,
    build_bootstrap_config,
    run_guarded,
    run_replicates,
)
from ..utils.random import RandomState, spawn_seeds
from .effect import estimate_effect
from .matching import MatchOrder
from .pipeline import MatchingPipeline

logger = logging.getLogger(__name__)


def _simple_replicate(
    matched: MatchedDataset, seed: np.random.SeedSequence
) -> ReplicateOutcome:
    rng = np.random.default_rng(seed)
    pair_indices = rng.integers(0, matched.n_pairs, size=matched.n_pairs)
    return run_guarded(
        lambda: estimate_effect(matched.resample_pairs(pair_indices)),
        label="simple bootstrap replicate",
    )


def _complex_replicate(
    dataset: Dataset, pipeline: MatchingPipeline, seed: np.random.SeedSequence
) -> ReplicateOutcome:
    rng = np.random.default_rng(seed)
    row_indices = rng.integers(0, dataset.n_observations, size=dataset.n_observations)
    resample = dataset.take(row_indices)
    return run_guarded(
        lambda: pipeline.estimate(resample, rng=rng),
        label="complex bootstrap replicate",
    )


class _BootstrapBase:
    """Shared configuration handling for both bootstrap methods."""

    method: str = "bootstrap"

    def __init__(
        self,
        bootstrap_config: BootstrapConfig | None = None,
        n_samples: int = 1000,
        confidence_level: float = 0.95,
        random_state: int | None = None,
        n_jobs: int = 1,
    ) -> None:
        """Initialize the bootstrap.

        Args:
            bootstrap_config: Full configuration; the remaining arguments are
                used only when it is None
            n_samples: Number of replications R
            confidence_level: Coverage of the percentile interval
            random_state: Seed used when ``run`` is not given a generator
            n_jobs: joblib workers

        Raises:
            InvalidConfiguration: If the arguments do not form a valid config
        """
        if bootstrap_config is None:
            bootstrap_config = build_bootstrap_config(
                n_samples=n_samples,
                confidence_level=confidence_level,
                random_state=random_state,
                n_jobs=n_jobs,
            )
        self.config = bootstrap_config

    def _seeds(self, rng: RandomState) -> list[np.random.SeedSequence]:
        source = rng if rng is not None else self.config.random_state
        return spawn_seeds(source, self.config.n_samples)


class SimpleBootstrap(_BootstrapBase):
    """Bootstrap over matched pairs; no model refitting."""

    method = "simple"

    def run(self, matched: MatchedDataset, rng: RandomState = None) -> BootstrapResult:
        """Estimate the standard error by resampling matched pairs.

        Args:
            matched: Matched dataset from the original sample
            rng: Seed, SeedSequence or Generator for the replicate streams

        Raises:
            EmptyGroupError: If the matched dataset has no pairs
            InsufficientReplicatesError: If fewer than two replicates succeed
        """
        if matched.n_pairs == 0:
            raise EmptyGroupError("Cannot bootstrap a matched sample with no pairs")

        logger.info(
            "Running simple bootstrap: R=%d over %d matched pairs",
            self.config.n_samples,
            matched.n_pairs,
        )
        outcomes = run_replicates(
            partial(_simple_replicate, matched),
            self._seeds(rng),
            n_jobs=self.config.n_jobs,
        )
        return BootstrapResult.from_outcomes(
            self.method, outcomes, self.config.confidence_level
        )


class ComplexBootstrap(_BootstrapBase):
    """Bootstrap over raw rows with propensity refit and rematching per replicate."""

    method = "complex"

    def __init__(
        self,
        bootstrap_config: BootstrapConfig | None = None,
        propensity_model_params: dict[str, Any] | None = None,
        match_order: MatchOrder = "data",
        **kwargs: Any,
    ) -> None:
        super().__init__(bootstrap_config, **kwargs)
        self.pipeline = MatchingPipeline(
            propensity_model_params=dict(propensity_model_params or {}),
            match_order=match_order,
        )

    def run(self, dataset: Dataset, rng: RandomState = None) -> BootstrapResult:
        """Estimate the standard error by resampling raw rows and rerunning the pipeline.

        Args:
            dataset: The raw (unmatched) sample
            rng: Seed, SeedSequence or Generator for the replicate streams

        Raises:
            InsufficientReplicatesError: If fewer than two replicates succeed
        """
        logger.info(
            "Running complex bootstrap: R=%d over %d raw rows",
            self.config.n_samples,
            dataset.n_observations,
        )
        outcomes = run_replicates(
            partial(_complex_replicate, dataset, self.pipeline),
            self._seeds(rng),
            n_jobs=self.config.n_jobs,
        )
        return BootstrapResult.from_outcomes(
            self.method, outcomes, self.config.confidence_level
        )
