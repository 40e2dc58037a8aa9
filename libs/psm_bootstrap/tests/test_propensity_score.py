"""Tests for the propensity score matching estimator."""

import numpy as np
import pytest

from psm_bootstrap.core.base import (
    CausalEffect,
    DataValidationError,
    EstimationError,
    InvalidConfiguration,
)
from psm_bootstrap.core.bootstrap import BootstrapConfig
from psm_bootstrap.estimators.propensity_score import PropensityScoreMatchingEstimator


class TestPropensityScoreMatchingEstimator:
    """Test the fit/estimate surface."""

    def setup_method(self):
        """Set up estimator arguments shared by the tests."""
        self.fast_bootstrap = {"bootstrap_samples": 50, "random_state": 42}

    def test_initialization(self):
        """Test estimator initialization."""
        estimator = PropensityScoreMatchingEstimator(
            match_order="random", bootstrap_method="complex", **self.fast_bootstrap
        )

        assert estimator.match_order == "random"
        assert estimator.bootstrap_method == "complex"
        assert estimator.bootstrap_config.n_samples == 50
        assert estimator.bootstrap_config.random_state == 42
        assert not estimator.is_fitted

    def test_invalid_bootstrap_method(self):
        """Unknown bootstrap methods are rejected."""
        with pytest.raises(InvalidConfiguration, match="Unknown bootstrap method"):
            PropensityScoreMatchingEstimator(bootstrap_method="wild")

    def test_fit_and_estimate(self, continuous_dataset):
        """Fitting produces a matched sample and an effect with a bootstrap SE."""
        estimator = PropensityScoreMatchingEstimator(**self.fast_bootstrap)
        estimator.fit(
            continuous_dataset.treatment,
            continuous_dataset.outcome,
            continuous_dataset.covariates,
        )
        effect = estimator.estimate_ate()

        assert isinstance(effect, CausalEffect)
        assert estimator.is_fitted
        assert effect.n_matched_pairs == estimator.get_matched_dataset().n_pairs
        assert effect.ate_se > 0
        assert effect.ate_ci_lower <= effect.ate_ci_upper
        assert effect.bootstrap_samples == 50
        assert len(effect.bootstrap_estimates) == 50
        assert "bootstrap" in effect.diagnostics
        assert "Propensity Score Matching" in effect.method

    def test_estimate_near_true_effect(self, continuous_dataset):
        """The matched estimate lands near the generative effect of 0.5."""
        estimator = PropensityScoreMatchingEstimator(bootstrap_method="none")
        estimator.fit(
            continuous_dataset.treatment,
            continuous_dataset.outcome,
            continuous_dataset.covariates,
        )
        effect = estimator.estimate_ate()

        assert effect.ate_se is None
        assert effect.confidence_interval is None
        assert abs(effect.ate - 0.5) < 0.5

    def test_complex_bootstrap_records_skips(self, continuous_dataset):
        """Complex bootstrap details are attached to the diagnostics."""
        estimator = PropensityScoreMatchingEstimator(
            bootstrap_method="complex",
            bootstrap_config=BootstrapConfig(n_samples=20, random_state=1),
        )
        estimator.fit(
            continuous_dataset.treatment,
            continuous_dataset.outcome,
            continuous_dataset.covariates,
        )
        details = estimator.estimate_ate().diagnostics["bootstrap"]

        assert details["method"] == "complex"
        assert details["n_requested"] == 20
        assert set(details["skipped"]) == {"model_fit_failure", "empty_group"}

    def test_estimate_is_cached(self, binary_dataset):
        """Repeated estimation returns the cached result."""
        estimator = PropensityScoreMatchingEstimator(**self.fast_bootstrap)
        estimator.fit(
            binary_dataset.treatment, binary_dataset.outcome, binary_dataset.covariates
        )

        assert estimator.estimate_ate() is estimator.estimate_ate()

    def test_diagnostic_getters(self, continuous_dataset):
        """Scores, balance and matching diagnostics are exposed after fitting."""
        estimator = PropensityScoreMatchingEstimator(bootstrap_method="none")
        assert estimator.get_propensity_scores() is None
        assert estimator.get_matching_diagnostics() is None

        estimator.fit(
            continuous_dataset.treatment,
            continuous_dataset.outcome,
            continuous_dataset.covariates,
        )

        scores = estimator.get_propensity_scores()
        assert scores.shape == (continuous_dataset.n_observations,)
        assert np.all((scores > 0) & (scores < 1))
        assert set(estimator.get_balance_diagnostics().smd_after) == {"X1", "X2"}
        assert 0 < estimator.get_matching_diagnostics()["match_rate"] <= 1

    def test_missing_covariates_raise(self, continuous_dataset):
        """Matching needs covariates."""
        estimator = PropensityScoreMatchingEstimator(bootstrap_method="none")

        with pytest.raises(EstimationError, match="require covariates"):
            estimator.fit(continuous_dataset.treatment, continuous_dataset.outcome)

    def test_mismatched_lengths_raise(self, continuous_dataset, make_dataset):
        """Inputs of different lengths are rejected."""
        other = make_dataset([1, 0], [1.0, 0.0])
        estimator = PropensityScoreMatchingEstimator(bootstrap_method="none")

        with pytest.raises(DataValidationError):
            estimator.fit(
                continuous_dataset.treatment, other.outcome, continuous_dataset.covariates
            )

    def test_estimate_before_fit_raises(self):
        """Estimation requires a fitted estimator."""
        with pytest.raises(EstimationError, match="must be fitted"):
            PropensityScoreMatchingEstimator().estimate_ate()
