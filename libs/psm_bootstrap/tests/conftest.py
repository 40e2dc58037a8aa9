"""Shared test fixtures for the matching bootstrap study.

This module provides reusable fixtures for hand-built datasets, generated
scenario data and small simulation configurations.
"""

import numpy as np
import pandas as pd
import pytest

from psm_bootstrap.core.base import CovariateData, Dataset, OutcomeData, TreatmentData
from psm_bootstrap.data.synthetic import SyntheticDataGenerator


def build_dataset(treatment, outcome, covariates=None, scenario="continuous"):
    """Build a Dataset from plain lists; covariates default to a row index."""
    treatment = np.asarray(treatment, dtype=int)
    if covariates is None:
        covariates = np.arange(len(treatment), dtype=float)
    covariates = np.asarray(covariates, dtype=float)
    if covariates.ndim == 1:
        covariates = covariates.reshape(-1, 1)
    names = [f"X{i + 1}" for i in range(covariates.shape[1])]

    return Dataset(
        treatment=TreatmentData(values=treatment),
        outcome=OutcomeData(
            values=np.asarray(outcome, dtype=float), outcome_type=scenario
        ),
        covariates=CovariateData(
            values=pd.DataFrame(covariates, columns=names), names=names
        ),
        scenario=scenario,
    )


@pytest.fixture
def random_state():
    """Provide a consistent random state for reproducible tests."""
    return 42


@pytest.fixture
def small_sample_size():
    """Small sample size for quick tests."""
    return 100


@pytest.fixture
def medium_sample_size():
    """Medium sample size for more realistic tests."""
    return 400


@pytest.fixture
def synthetic_data_generator():
    """Provide a generator with unit outcome noise."""
    return SyntheticDataGenerator(noise_std=1.0)


@pytest.fixture
def continuous_dataset(synthetic_data_generator, medium_sample_size, random_state):
    """Confounded treatment with a continuous outcome."""
    return synthetic_data_generator.generate(
        medium_sample_size, "continuous", rng=random_state
    )


@pytest.fixture
def binary_dataset(synthetic_data_generator, medium_sample_size, random_state):
    """Randomized treatment with a binary outcome."""
    return synthetic_data_generator.generate(
        medium_sample_size, "binary", rng=random_state
    )


@pytest.fixture
def hand_built_dataset():
    """Two treated and two control rows with known outcomes.

    Treated outcomes are 2 and 4, control outcomes are 1 and 1, so the
    matched effect is 2.0 whatever the pairing.
    """
    return build_dataset(
        treatment=[1, 1, 0, 0],
        outcome=[2.0, 4.0, 1.0, 1.0],
        covariates=[0.0, 1.0, 0.1, 0.9],
    )


@pytest.fixture
def hand_built_scores():
    """Propensity scores aligned with ``hand_built_dataset``."""
    return np.array([0.30, 0.70, 0.32, 0.68])


@pytest.fixture
def tiny_dataset():
    """Ten rows where most bootstrap resamples are degenerate."""
    return build_dataset(
        treatment=[1, 0, 0, 0, 0, 0, 0, 0, 0, 0],
        outcome=[3.0, 1.0, 1.5, 0.5, 1.2, 0.8, 1.1, 0.9, 1.3, 0.7],
        covariates=np.linspace(-1.0, 1.0, 10),
    )


@pytest.fixture
def make_dataset():
    """Factory for hand-built datasets."""
    return build_dataset
