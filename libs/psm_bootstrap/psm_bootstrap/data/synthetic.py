"""Synthetic data generation for the matching bootstrap study.

Two generative schemes with known treatment-assignment and outcome mechanisms:

Continuous scenario::

    X1 ~ N(0, 1),  X2 ~ Bernoulli(0.5)
    p  = logistic(0.5 + 0.1*X1 - 0.2*X2),  T ~ Bernoulli(p)
    Y  = 1 + 0.5*T + 0.3*X1 - 0.2*X2 + eps,  eps ~ N(0, noise_std^2)

Binary scenario::

    X1 ~ N(0, 1),  X2 ~ Bernoulli(0.5),  T ~ Bernoulli(0.5)
    Y  = 1{X1 + X2 - 1 + eps + 0.5*T > 0},  eps ~ N(0, noise_std^2)

Draws are always taken in the order X1, X2, T, eps so a seeded generator
reproduces the same dataset.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from ..core.base import CovariateData, Dataset, OutcomeData, TreatmentData
from ..utils.random import RandomState, as_generator
from ..utils.validation import validate_positive_int, validate_scenario

# Assignment model, continuous scenario
PROPENSITY_INTERCEPT: float = 0.5
PROPENSITY_X1: float = 0.1
PROPENSITY_X2: float = -0.2

# Outcome model, continuous scenario
OUTCOME_INTERCEPT: float = 1.0
TREATMENT_EFFECT: float = 0.5
OUTCOME_X1: float = 0.3
OUTCOME_X2: float = -0.2

# Latent index, binary scenario
BINARY_THRESHOLD_SHIFT: float = -1.0
BINARY_TREATMENT_SHIFT: float = 0.5
BINARY_TREATMENT_PROBABILITY: float = 0.5

COVARIATE_NAMES: list[str] = ["X1", "X2"]


def logistic(z: NDArray[np.float64]) -> NDArray[np.float64]:
    """Standard logistic function."""
    return 1.0 / (1.0 + np.exp(-z))


class SyntheticDataGenerator:
    """Generator for the continuous and binary outcome scenarios."""

    def __init__(self, noise_std: float = 1.0):
        """Initialize the synthetic data generator.

        Args:
            noise_std: Standard deviation of the outcome noise term
        """
        if noise_std < 0:
            raise ValueError("noise_std must be non-negative")
        self.noise_std = noise_std

    def generate(
        self,
        n: int = 1000,
        scenario: str = "continuous",
        rng: RandomState = None,
    ) -> Dataset:
        """Generate one dataset for the given scenario.

        Args:
            n: Number of observations
            scenario: 'continuous' or 'binary'
            rng: Generator, seed, or None for fresh entropy

        Returns:
            Dataset with covariates X1, X2, treatment and outcome

        Raises:
            InvalidConfiguration: If n is not positive or scenario is unknown
        """
        validate_scenario(scenario)
        if scenario == "continuous":
            return self.generate_continuous(n, rng)
        return self.generate_binary(n, rng)

    def generate_continuous(self, n: int = 1000, rng: RandomState = None) -> Dataset:
        """Generate data with confounded treatment and a continuous outcome."""
        n = validate_positive_int(n, "n")
        rng = as_generator(rng)

        x1 = rng.standard_normal(n)
        x2 = rng.binomial(1, 0.5, n).astype(float)
        propensity = logistic(PROPENSITY_INTERCEPT + PROPENSITY_X1 * x1 + PROPENSITY_X2 * x2)
        treatment = rng.binomial(1, propensity)
        noise = rng.normal(0.0, self.noise_std, n)

        outcome = (
            OUTCOME_INTERCEPT
            + TREATMENT_EFFECT * treatment
            + OUTCOME_X1 * x1
            + OUTCOME_X2 * x2
            + noise
        )

        return self._build_dataset(x1, x2, treatment, outcome, "continuous")

    def generate_binary(self, n: int = 1000, rng: RandomState = None) -> Dataset:
        """Generate data with randomized treatment and a binary outcome."""
        n = validate_positive_int(n, "n")
        rng = as_generator(rng)

        x1 = rng.standard_normal(n)
        x2 = rng.binomial(1, 0.5, n).astype(float)
        treatment = rng.binomial(1, BINARY_TREATMENT_PROBABILITY, n)
        noise = rng.normal(0.0, self.noise_std, n)

        latent = (
            x1 + x2 + BINARY_THRESHOLD_SHIFT + noise + BINARY_TREATMENT_SHIFT * treatment
        )
        outcome = (latent > 0).astype(float)

        return self._build_dataset(x1, x2, treatment, outcome, "binary")

    @staticmethod
    def true_propensity(dataset: Dataset) -> NDArray[np.float64]:
        """Known treatment-assignment probabilities for a generated dataset."""
        if dataset.scenario == "binary":
            return np.full(dataset.n_observations, BINARY_TREATMENT_PROBABILITY)

        x = dataset.covariate_matrix
        return logistic(
            PROPENSITY_INTERCEPT + PROPENSITY_X1 * x[:, 0] + PROPENSITY_X2 * x[:, 1]
        )

    @staticmethod
    def _build_dataset(
        x1: NDArray[np.float64],
        x2: NDArray[np.float64],
        treatment: NDArray[np.int_],
        outcome: NDArray[np.float64],
        scenario: str,
    ) -> Dataset:
        return Dataset(
            treatment=TreatmentData(values=np.asarray(treatment, dtype=int)),
            outcome=OutcomeData(values=np.asarray(outcome, dtype=float), outcome_type=scenario),
            covariates=CovariateData(
                values=pd.DataFrame({"X1": x1, "X2": x2}),
                names=list(COVARIATE_NAMES),
            ),
            scenario=scenario,
        )


def generate_dataset(
    n: int = 1000,
    scenario: str = "continuous",
    rng: RandomState = None,
    noise_std: float = 1.0,
) -> Dataset:
    """Generate one dataset (convenience function)."""
    return SyntheticDataGenerator(noise_std=noise_std).generate(n, scenario, rng)
