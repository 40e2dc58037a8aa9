"""Propensity score matching estimator with bootstrap standard errors.

Wraps the estimate -> match -> estimate-effect pipeline in the library's
fit/estimate interface and attaches a simple or complex bootstrap standard
error plus balance and matching diagnostics.

Example Usage:
    >>> from psm_bootstrap.data.synthetic import generate_dataset
    >>> from psm_bootstrap.estimators.propensity_score import (
    ...     PropensityScoreMatchingEstimator,
    ... )
    >>>
    >>> dataset = generate_dataset(n=500, scenario="continuous", rng=7)
    >>> estimator = PropensityScoreMatchingEstimator(
    ...     bootstrap_method="complex",
    ...     bootstrap_samples=200,
    ...     random_state=7,
    ... )
    >>> estimator.fit(dataset.treatment, dataset.outcome, dataset.covariates)
    >>> effect = estimator.estimate_ate()
    >>> effect.ate_se > 0
    True
"""

from __future__ import annotations

import logging
from typing import Any, Literal

import numpy as np
from numpy.typing import NDArray

from ..core.base import (
    BaseEstimator,
    CausalEffect,
    CovariateData,
    Dataset,
    EstimationError,
    InvalidConfiguration,
    MatchedDataset,
    OutcomeData,
    TreatmentData,
)
from ..core.bootstrap import BootstrapConfig, BootstrapResult, build_bootstrap_config
from ..diagnostics.balance import (
    BalanceResults,
    assess_matched_balance,
    matching_diagnostics,
)
from .bootstrap import ComplexBootstrap, SimpleBootstrap
from .effect import estimate_effect
from .matching import MatchOrder
from .pipeline import MatchingPipeline

logger = logging.getLogger(__name__)

BootstrapMethod = Literal["simple", "complex", "none"]


class PropensityScoreMatchingEstimator(BaseEstimator):
    """1:1 nearest-neighbor propensity score matching estimator.

    Attributes:
        matched_dataset: Matched sample built during ``fit``
        balance_diagnostics: Covariate balance before and after matching
        bootstrap_result: Result of the last bootstrap run, if any
    """

    def __init__(
        self,
        match_order: MatchOrder = "data",
        propensity_model_params: dict[str, Any] | None = None,
        bootstrap_method: BootstrapMethod = "simple",
        bootstrap_config: BootstrapConfig | None = None,
        balance_threshold: float = 0.1,
        bootstrap_samples: int = 1000,
        confidence_level: float = 0.95,
        random_state: int | None = None,
        verbose: bool = False,
    ) -> None:
        """Initialize the estimator.

        Args:
            match_order: Treated processing order ('data' or 'random')
            propensity_model_params: Overrides for the logistic regression
            bootstrap_method: 'simple', 'complex', or 'none' to skip the SE
            bootstrap_config: Bootstrap configuration; built from
                ``bootstrap_samples``, ``confidence_level`` and
                ``random_state`` when omitted
            balance_threshold: SMD threshold for the balance diagnostics
            bootstrap_samples: Number of bootstrap replications R
            confidence_level: Coverage of the percentile interval
            random_state: Seed for matching order and bootstrap streams
            verbose: Log progress at INFO instead of DEBUG
        """
        super().__init__(random_state=random_state, verbose=verbose)

        if bootstrap_method not in ("simple", "complex", "none"):
            raise InvalidConfiguration(f"Unknown bootstrap method: {bootstrap_method}")

        if bootstrap_config is None and bootstrap_method != "none":
            bootstrap_config = build_bootstrap_config(
                n_samples=bootstrap_samples,
                confidence_level=confidence_level,
                random_state=random_state,
            )

        self.match_order = match_order
        self.propensity_model_params = dict(propensity_model_params or {})
        self.bootstrap_method = bootstrap_method
        self.bootstrap_config = bootstrap_config
        self.balance_threshold = balance_threshold

        self.pipeline = MatchingPipeline(
            propensity_model_params=self.propensity_model_params,
            match_order=match_order,
        )

        self.dataset: Dataset | None = None
        self.matched_dataset: MatchedDataset | None = None
        self.balance_diagnostics: BalanceResults | None = None
        self.bootstrap_result: BootstrapResult | None = None

    def _log(self, message: str, *args: Any) -> None:
        logger.log(logging.INFO if self.verbose else logging.DEBUG, message, *args)

    def _fit_implementation(
        self,
        treatment: TreatmentData,
        outcome: OutcomeData,
        covariates: CovariateData | None = None,
    ) -> None:
        if covariates is None:
            raise EstimationError(
                "Propensity score methods require covariates for estimation. "
                "Without covariates, these methods reduce to simple difference in means."
            )

        self.dataset = Dataset(
            treatment=treatment,
            outcome=outcome,
            covariates=covariates,
            scenario=outcome.outcome_type,
        )
        rng = np.random.default_rng(self.random_state)
        self.matched_dataset = self.pipeline.match(self.dataset, rng=rng)
        self.balance_diagnostics = assess_matched_balance(
            self.matched_dataset, self.balance_threshold
        )

        self._log(
            "Matched %d/%d treated units (%d unmatched)",
            self.matched_dataset.n_pairs,
            self.dataset.n_treated,
            self.matched_dataset.n_unmatched_treated,
        )

    def _run_bootstrap(self) -> BootstrapResult | None:
        if self.bootstrap_method == "none" or self.bootstrap_config is None:
            return None
        if self.dataset is None or self.matched_dataset is None:
            raise EstimationError("Model must be fitted before bootstrapping")

        if self.bootstrap_method == "simple":
            return SimpleBootstrap(self.bootstrap_config).run(self.matched_dataset)
        return ComplexBootstrap(
            self.bootstrap_config,
            propensity_model_params=self.propensity_model_params,
            match_order=self.match_order,
        ).run(self.dataset)

    def _estimate_ate_implementation(self) -> CausalEffect:
        if self.dataset is None or self.matched_dataset is None:
            raise EstimationError("Model must be fitted before estimation")

        ate = estimate_effect(self.matched_dataset)
        self.bootstrap_result = self._run_bootstrap()

        diagnostics: dict[str, Any] = {
            "matching": matching_diagnostics(self.matched_dataset),
        }
        if self.balance_diagnostics is not None:
            diagnostics["balance"] = self.balance_diagnostics

        ate_se = ci_lower = ci_upper = None
        bootstrap_estimates = None
        if self.bootstrap_result is not None:
            ate_se = self.bootstrap_result.standard_error
            ci_lower = self.bootstrap_result.ci_lower
            ci_upper = self.bootstrap_result.ci_upper
            bootstrap_estimates = np.asarray(self.bootstrap_result.estimates)
            diagnostics["bootstrap"] = self.bootstrap_result.to_dict()
            self._log(
                "%s bootstrap SE %.4f (%d skipped)",
                self.bootstrap_method.title(),
                ate_se,
                self.bootstrap_result.n_skipped,
            )

        return CausalEffect(
            ate=ate,
            ate_se=ate_se,
            ate_ci_lower=ci_lower,
            ate_ci_upper=ci_upper,
            confidence_level=self.bootstrap_config.confidence_level
            if self.bootstrap_config
            else 0.95,
            method=f"Propensity Score Matching ({self.bootstrap_method} bootstrap)",
            n_observations=self.dataset.n_observations,
            n_treated=self.dataset.n_treated,
            n_control=self.dataset.n_control,
            n_matched_pairs=self.matched_dataset.n_pairs,
            diagnostics=diagnostics,
            bootstrap_samples=self.bootstrap_config.n_samples
            if self.bootstrap_config
            else 0,
            bootstrap_estimates=bootstrap_estimates,
        )

    # Public diagnostic methods
    def get_propensity_scores(self) -> NDArray[Any] | None:
        """Get the estimated propensity scores, if fitted."""
        if self.matched_dataset is None:
            return None
        return self.matched_dataset.propensity_scores

    def get_matched_dataset(self) -> MatchedDataset | None:
        """Get the matched sample, if fitted."""
        return self.matched_dataset

    def get_balance_diagnostics(self) -> BalanceResults | None:
        """Get covariate balance diagnostics, if fitted."""
        return self.balance_diagnostics

    def get_matching_diagnostics(self) -> dict[str, Any] | None:
        """Get match rate and distance diagnostics, if fitted."""
        if self.matched_dataset is None:
            return None
        return matching_diagnostics(self.matched_dataset)
