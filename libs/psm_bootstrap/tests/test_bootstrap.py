"""Tests for simple and complex bootstrap standard errors."""

import numpy as np
import pytest

from psm_bootstrap.core.base import (
    EmptyGroupError,
    InsufficientReplicatesError,
    InvalidConfiguration,
    MatchedDataset,
    ModelFitFailure,
)
from psm_bootstrap.core.bootstrap import (
    BootstrapConfig,
    BootstrapResult,
    ReplicateOutcome,
    build_bootstrap_config,
    run_guarded,
    summarize_replicates,
)
from psm_bootstrap.estimators.bootstrap import ComplexBootstrap, SimpleBootstrap
from psm_bootstrap.estimators.pipeline import MatchingPipeline


class TestBootstrapConfig:
    """Test BootstrapConfig validation."""

    def test_default_config(self):
        """Test default bootstrap configuration."""
        config = BootstrapConfig()
        assert config.n_samples == 1000
        assert config.confidence_level == 0.95
        assert config.random_state is None
        assert config.n_jobs == 1

    def test_config_validation(self):
        """Invalid values are rejected by the model."""
        with pytest.raises(ValueError):
            BootstrapConfig(n_samples=0)

        with pytest.raises(ValueError, match="denominator R - 1"):
            BootstrapConfig(n_samples=1)

        with pytest.raises(ValueError):
            BootstrapConfig(confidence_level=1.1)

        with pytest.raises(ValueError):
            BootstrapConfig(n_jobs=0)

    def test_builder_reports_invalid_configuration(self):
        """The builder surfaces validation errors as InvalidConfiguration."""
        with pytest.raises(InvalidConfiguration, match="Invalid bootstrap configuration"):
            build_bootstrap_config(n_samples=-10)

        with pytest.raises(InvalidConfiguration, match="n_samples must be at least 2"):
            build_bootstrap_config(n_samples=1)

    def test_bootstrap_constructor_validates(self):
        """Bootstraps fail before any replicate runs."""
        with pytest.raises(InvalidConfiguration):
            SimpleBootstrap(n_samples=0)


class TestReplicateSummary:
    """Test combining replicate outcomes."""

    def test_sample_standard_deviation(self):
        """The spread uses denominator R - 1."""
        outcomes = [ReplicateOutcome(estimate=v) for v in (1.0, 2.0, 3.0, 4.0)]
        summary = summarize_replicates(outcomes)

        assert summary.standard_deviation == pytest.approx(np.std([1, 2, 3, 4], ddof=1))
        assert summary.n_successful == 4
        assert summary.n_skipped == 0

    def test_failures_are_counted_by_kind(self):
        """Skipped replicates are tallied per failure kind."""
        outcomes = [
            ReplicateOutcome(estimate=1.0),
            ReplicateOutcome(failure="model_fit_failure"),
            ReplicateOutcome(estimate=2.0),
            ReplicateOutcome(failure="empty_group"),
            ReplicateOutcome(failure="model_fit_failure"),
        ]
        summary = summarize_replicates(outcomes)

        assert summary.skipped == {"model_fit_failure": 2, "empty_group": 1}
        assert summary.estimates == (1.0, 2.0)

    def test_fewer_than_two_successes_raise(self):
        """One successful replicate has no standard deviation."""
        outcomes = [ReplicateOutcome(estimate=1.0), ReplicateOutcome(failure="empty_group")]

        with pytest.raises(InsufficientReplicatesError, match="only 1 of 2"):
            summarize_replicates(outcomes)

    def test_run_guarded_catches_skippable_failures(self):
        """Fit failures become counted outcomes."""

        def fail():
            raise ModelFitFailure("degenerate")

        assert run_guarded(fail).failure == "model_fit_failure"

    def test_run_guarded_propagates_other_errors(self):
        """Unexpected exceptions abort the run."""

        def fail():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            run_guarded(fail)


class TestSimpleBootstrap:
    """Test pair-resampling bootstrap."""

    @pytest.fixture
    def matched(self, continuous_dataset):
        return MatchingPipeline().match(continuous_dataset)

    def test_standard_error_is_positive(self, matched):
        """SE is finite and positive on a realistic sample."""
        result = SimpleBootstrap(n_samples=200, random_state=1).run(matched)

        assert isinstance(result, BootstrapResult)
        assert result.method == "simple"
        assert np.isfinite(result.standard_error)
        assert result.standard_error > 0
        assert result.n_successful == 200
        assert result.n_skipped == 0

    def test_same_seed_same_result(self, matched):
        """Results are bit-identical under a fixed seed."""
        first = SimpleBootstrap(n_samples=100, random_state=5).run(matched)
        second = SimpleBootstrap(n_samples=100, random_state=5).run(matched)

        assert first.estimates == second.estimates
        assert first.standard_error == second.standard_error

    def test_independent_of_n_jobs(self, matched):
        """Parallel execution reproduces the sequential result."""
        sequential = SimpleBootstrap(n_samples=40, random_state=8).run(matched)
        parallel = SimpleBootstrap(n_samples=40, random_state=8, n_jobs=2).run(matched)

        assert sequential.estimates == parallel.estimates

    def test_generator_argument_overrides_seed(self, matched):
        """An explicit generator drives the replicate streams."""
        first = SimpleBootstrap(n_samples=50).run(matched, rng=np.random.default_rng(4))
        second = SimpleBootstrap(n_samples=50).run(matched, rng=np.random.default_rng(4))

        assert first.estimates == second.estimates

    def test_constant_outcomes_give_zero_se(self, hand_built_dataset, hand_built_scores):
        """Identical pair differences give a zero standard error."""
        dataset = hand_built_dataset.take([0, 0, 2, 3])
        matched = MatchedDataset(
            source=dataset,
            propensity_scores=hand_built_scores,
            pairs=np.array([[0, 2], [1, 3]]),
        )

        result = SimpleBootstrap(n_samples=20, random_state=0).run(matched)

        assert result.standard_error == 0.0

    def test_no_pairs_raises(self, hand_built_dataset, hand_built_scores):
        """A matched sample without pairs cannot be bootstrapped."""
        matched = MatchedDataset(
            source=hand_built_dataset,
            propensity_scores=hand_built_scores,
            pairs=np.empty((0, 2), dtype=int),
        )

        with pytest.raises(EmptyGroupError, match="no pairs"):
            SimpleBootstrap(n_samples=10).run(matched)

    def test_percentile_interval(self, matched):
        """The percentile interval brackets the replicate median."""
        result = SimpleBootstrap(n_samples=200, random_state=2).run(matched)
        summary = result.to_dict()

        assert result.ci_lower <= np.median(result.estimates) <= result.ci_upper
        assert summary["n_successful"] == 200
        assert summary["skipped"] == {"model_fit_failure": 0, "empty_group": 0}


class TestComplexBootstrap:
    """Test row-resampling bootstrap with refit and rematch."""

    def test_standard_error_is_positive(self, continuous_dataset):
        """SE is finite and positive on a realistic sample."""
        result = ComplexBootstrap(n_samples=50, random_state=1).run(continuous_dataset)

        assert result.method == "complex"
        assert np.isfinite(result.standard_error)
        assert result.standard_error > 0
        assert result.n_successful + result.n_skipped == 50

    def test_same_seed_same_result(self, binary_dataset):
        """Results are bit-identical under a fixed seed."""
        first = ComplexBootstrap(n_samples=30, random_state=3).run(binary_dataset)
        second = ComplexBootstrap(n_samples=30, random_state=3).run(binary_dataset)

        assert first.estimates == second.estimates

    def test_independent_of_n_jobs(self, continuous_dataset):
        """Parallel execution reproduces the sequential result."""
        sequential = ComplexBootstrap(n_samples=12, random_state=6).run(
            continuous_dataset
        )
        parallel = ComplexBootstrap(n_samples=12, random_state=6, n_jobs=2).run(
            continuous_dataset
        )

        assert sequential.estimates == parallel.estimates

    def test_random_match_order_reproducible(self, continuous_dataset):
        """Random processing order inside replicates follows the replicate seed."""
        bootstrap = ComplexBootstrap(match_order="random", n_samples=10, random_state=2)

        assert (
            bootstrap.run(continuous_dataset).estimates
            == bootstrap.run(continuous_dataset).estimates
        )

    def test_degenerate_resamples_are_skipped_and_counted(self, tiny_dataset):
        """Resamples without a treated row fail to fit and are counted."""
        result = ComplexBootstrap(n_samples=200, random_state=0).run(tiny_dataset)

        assert result.skipped["model_fit_failure"] > 0
        assert result.n_successful + result.n_skipped == 200
        assert result.n_successful >= 2
        assert result.standard_error >= 0

    def test_too_few_successes_raise(self, make_dataset):
        """Every resample failing leaves no standard deviation."""
        dataset = make_dataset([1, 1, 1, 1], [2.0, 1.0, 3.0, 0.0])

        with pytest.raises(InsufficientReplicatesError, match="only 0 of 3"):
            ComplexBootstrap(n_samples=3, random_state=0).run(dataset)
