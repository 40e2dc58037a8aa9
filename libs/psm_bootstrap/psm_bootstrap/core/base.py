"""Base data models, result types and errors for the matching bootstrap study.

This module provides the data containers that flow through the pipeline
(raw ``Dataset`` -> ``MatchedDataset`` -> effect estimate) together with the
exception hierarchy shared by every stage.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, Literal

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from pydantic import BaseModel, Field, field_validator

Scenario = Literal["continuous", "binary"]
SCENARIOS: tuple[str, ...] = ("continuous", "binary")


class TreatmentData(BaseModel):
    """Data model for binary treatment assignments."""

    values: pd.Series | NDArray[Any] = Field(
        ..., description="Treatment assignment values"
    )
    name: str = Field(default="treatment", description="Name of the treatment variable")
    treatment_type: str = Field(
        default="binary", description="Type of treatment (only 'binary' is supported)"
    )

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("treatment_type")
    @classmethod
    def validate_treatment_type(cls, v: str) -> str:
        """Validate treatment type is binary."""
        if v != "binary":
            raise ValueError("treatment_type must be 'binary'")
        return v

    @field_validator("values")
    @classmethod
    def validate_values(cls, v: pd.Series | NDArray[Any]) -> pd.Series | NDArray[Any]:
        """Validate treatment values are not empty."""
        if len(v) == 0:
            raise ValueError("Treatment values cannot be empty")
        return v


class OutcomeData(BaseModel):
    """Data model for outcome variables."""

    values: pd.Series | NDArray[Any] = Field(..., description="Outcome values")
    name: str = Field(default="outcome", description="Name of the outcome variable")
    outcome_type: str = Field(
        default="continuous",
        description="Type of outcome: 'continuous' or 'binary'",
    )

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("outcome_type")
    @classmethod
    def validate_outcome_type(cls, v: str) -> str:
        """Validate outcome type is one of allowed values."""
        allowed_types = set(SCENARIOS)
        if v not in allowed_types:
            raise ValueError(f"outcome_type must be one of {allowed_types}")
        return v

    @field_validator("values")
    @classmethod
    def validate_values(cls, v: pd.Series | NDArray[Any]) -> pd.Series | NDArray[Any]:
        """Validate outcome values are not empty."""
        if len(v) == 0:
            raise ValueError("Outcome values cannot be empty")
        return v


class CovariateData(BaseModel):
    """Data model for covariate/confounder variables."""

    values: pd.DataFrame | NDArray[Any] = Field(..., description="Covariate values")
    names: list[str] = Field(
        default_factory=list, description="Names of the covariate variables"
    )

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("values")
    @classmethod
    def validate_values(
        cls, v: pd.DataFrame | NDArray[Any]
    ) -> pd.DataFrame | NDArray[Any]:
        """Validate covariate values are not empty."""
        if len(v) == 0:
            raise ValueError("Covariate values cannot be empty")
        return v


class CausalInferenceError(Exception):
    """Base exception class for matching and bootstrap errors."""

    pass


class DataValidationError(CausalInferenceError):
    """Raised when input data fails validation."""

    pass


class InvalidConfiguration(CausalInferenceError, ValueError):
    """Raised for unusable study settings before any simulation work starts."""

    pass


class EstimationError(CausalInferenceError):
    """Raised when estimation process fails."""

    pass


class ModelFitFailure(EstimationError):
    """Raised when the propensity model cannot be fitted.

    Happens when the treatment column is degenerate (all treated or all
    control), which is common in small bootstrap resamples.
    """

    pass


class EmptyGroupError(EstimationError):
    """Raised when a matched sample has no treated or no control rows."""

    pass


class InsufficientReplicatesError(EstimationError):
    """Raised when too few replicates succeed to compute a standard deviation."""

    pass


# Failure kinds recorded by the skip-and-count policy
FAILURE_KINDS: dict[type[EstimationError], str] = {
    ModelFitFailure: "model_fit_failure",
    EmptyGroupError: "empty_group",
}


def empty_failure_counts() -> dict[str, int]:
    """Zeroed counter for each skippable failure kind."""
    return {kind: 0 for kind in FAILURE_KINDS.values()}


@dataclass(frozen=True)
class Dataset:
    """Ordered, immutable sample of observations.

    Each row holds a binary treatment, an outcome and a fixed covariate
    vector. Both simulated (raw) data and bootstrap resamples are Datasets.
    """

    treatment: TreatmentData
    outcome: OutcomeData
    covariates: CovariateData
    scenario: str = "continuous"

    def __post_init__(self) -> None:
        n_treatment = len(self.treatment.values)
        n_outcome = len(self.outcome.values)
        n_covariates = len(self.covariates.values)
        if not n_treatment == n_outcome == n_covariates:
            raise DataValidationError(
                "Treatment, outcome and covariates must have the same number of rows. "
                f"Got {n_treatment}, {n_outcome} and {n_covariates}."
            )
        if self.scenario not in SCENARIOS:
            raise DataValidationError(f"Unknown scenario: {self.scenario}")

        treatment_values = np.asarray(self.treatment.values)
        if not np.isin(treatment_values, (0, 1)).all():
            raise DataValidationError("Treatment values must be 0 or 1")
        if not np.all(np.isfinite(self.outcome_values)):
            raise DataValidationError("Outcome values must be finite (no NaN or inf)")
        if not np.all(np.isfinite(self.covariate_matrix)):
            raise DataValidationError("Covariate values must be finite (no NaN or inf)")

    @property
    def n_observations(self) -> int:
        return len(self.treatment.values)

    @property
    def treatment_values(self) -> NDArray[np.int_]:
        return np.asarray(self.treatment.values, dtype=int)

    @property
    def outcome_values(self) -> NDArray[np.float64]:
        return np.asarray(self.outcome.values, dtype=float)

    @property
    def covariate_matrix(self) -> NDArray[np.float64]:
        return np.asarray(self.covariates.values, dtype=float)

    @property
    def covariate_names(self) -> list[str]:
        if isinstance(self.covariates.values, pd.DataFrame):
            return list(self.covariates.values.columns)
        return self.covariates.names or [
            f"X{i + 1}" for i in range(self.covariate_matrix.shape[1])
        ]

    @property
    def outcome_type(self) -> str:
        return self.outcome.outcome_type

    @property
    def n_treated(self) -> int:
        return int(np.sum(self.treatment_values == 1))

    @property
    def n_control(self) -> int:
        return int(np.sum(self.treatment_values == 0))

    def take(self, indices: NDArray[np.int_] | list[int]) -> Dataset:
        """Select rows in the given order; repeated indices repeat rows."""
        idx = np.asarray(indices, dtype=int)
        names = self.covariate_names
        return Dataset(
            treatment=TreatmentData(values=self.treatment_values[idx]),
            outcome=OutcomeData(
                values=self.outcome_values[idx], outcome_type=self.outcome_type
            ),
            covariates=CovariateData(
                values=pd.DataFrame(self.covariate_matrix[idx], columns=names),
                names=names,
            ),
            scenario=self.scenario,
        )

    def to_frame(self) -> pd.DataFrame:
        """Return the rows as a DataFrame with covariate, treatment and outcome columns."""
        frame = pd.DataFrame(self.covariate_matrix, columns=self.covariate_names)
        frame["treatment"] = self.treatment_values
        frame["outcome"] = self.outcome_values
        return frame

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        scenario: str = "continuous",
        treatment_column: str = "treatment",
        outcome_column: str = "outcome",
    ) -> Dataset:
        """Build a Dataset from a DataFrame; every other column is a covariate."""
        missing = {treatment_column, outcome_column} - set(frame.columns)
        if missing:
            raise DataValidationError(f"Missing required columns: {sorted(missing)}")

        covariate_columns = [
            c for c in frame.columns if c not in (treatment_column, outcome_column)
        ]
        if not covariate_columns:
            raise DataValidationError("At least one covariate column is required")

        return cls(
            treatment=TreatmentData(values=frame[treatment_column].to_numpy(dtype=int)),
            outcome=OutcomeData(
                values=frame[outcome_column].to_numpy(dtype=float),
                outcome_type=scenario,
            ),
            covariates=CovariateData(
                values=frame[covariate_columns].reset_index(drop=True),
                names=covariate_columns,
            ),
            scenario=scenario,
        )


@dataclass(frozen=True)
class MatchedDataset:
    """1:1 matched subset of a source Dataset.

    ``pairs`` holds ``(treated_row, control_row)`` indices into ``source`` in
    the order the matcher produced them. A control row appears in at most one
    pair unless the pairs were drawn by bootstrap resampling.
    """

    source: Dataset
    propensity_scores: NDArray[np.float64]
    pairs: NDArray[np.int_]
    n_unmatched_treated: int = 0

    @property
    def n_pairs(self) -> int:
        return int(self.pairs.shape[0])

    @property
    def treated_indices(self) -> NDArray[np.int_]:
        return self.pairs[:, 0]

    @property
    def control_indices(self) -> NDArray[np.int_]:
        return self.pairs[:, 1]

    @property
    def treated_outcomes(self) -> NDArray[np.float64]:
        return self.source.outcome_values[self.treated_indices]

    @property
    def control_outcomes(self) -> NDArray[np.float64]:
        return self.source.outcome_values[self.control_indices]

    @property
    def distances(self) -> NDArray[np.float64]:
        """Absolute propensity-score distance within each pair."""
        return np.abs(
            self.propensity_scores[self.treated_indices]
            - self.propensity_scores[self.control_indices]
        )

    @property
    def outcome_type(self) -> str:
        return self.source.outcome_type

    def resample_pairs(self, pair_indices: NDArray[np.int_]) -> MatchedDataset:
        """Return a matched dataset made of the selected pairs (pairs stay intact)."""
        return MatchedDataset(
            source=self.source,
            propensity_scores=self.propensity_scores,
            pairs=self.pairs[np.asarray(pair_indices, dtype=int)],
            n_unmatched_treated=self.n_unmatched_treated,
        )

    def to_frame(self) -> pd.DataFrame:
        """Stack matched rows (treated first, then controls) with a ``pair_id`` column."""
        pair_ids = np.arange(self.n_pairs)
        rows = np.concatenate([self.treated_indices, self.control_indices])
        frame = self.source.to_frame().iloc[rows].reset_index(names="row")
        frame["propensity_score"] = self.propensity_scores[rows]
        frame["pair_id"] = np.concatenate([pair_ids, pair_ids])
        return frame


@dataclass
class CausalEffect:
    """Result of a matching analysis on one dataset."""

    # Core estimates
    ate: float  # Treated-minus-control mean difference on the matched sample
    ate_se: float | None = None  # Bootstrap standard error
    ate_ci_lower: float | None = None  # Lower percentile bound
    ate_ci_upper: float | None = None  # Upper percentile bound
    confidence_level: float = 0.95

    # Method-specific information
    method: str = "unknown"
    n_observations: int | None = None
    n_treated: int | None = None
    n_control: int | None = None
    n_matched_pairs: int | None = None

    # Model diagnostics
    diagnostics: dict[str, Any] = field(default_factory=dict)

    # Bootstrap details
    bootstrap_samples: int | None = None
    bootstrap_estimates: NDArray[Any] | None = None

    def __post_init__(self) -> None:
        """Validate the causal effect estimates after initialization."""
        if self.ate_ci_lower is not None and self.ate_ci_upper is not None:
            if self.ate_ci_lower > self.ate_ci_upper:
                raise ValueError("Lower confidence bound cannot exceed upper bound")

        if self.confidence_level <= 0 or self.confidence_level >= 1:
            raise ValueError("Confidence level must be between 0 and 1")

    @property
    def confidence_interval(self) -> tuple[float, float] | None:
        """Get confidence interval as a tuple, if one was computed."""
        if self.ate_ci_lower is not None and self.ate_ci_upper is not None:
            return (self.ate_ci_lower, self.ate_ci_upper)
        return None


class BaseEstimator(abc.ABC):
    """Abstract base class for fit/estimate style estimators.

    Attributes:
        is_fitted: Whether the estimator has been fitted to data
        treatment_data: The treatment assignment data
        outcome_data: The outcome variable data
        covariate_data: The covariate/confounder data
    """

    def __init__(
        self,
        random_state: int | None = None,
        verbose: bool = False,
    ) -> None:
        self.random_state = random_state
        self.verbose = verbose
        self.is_fitted = False

        # Data containers
        self.treatment_data: TreatmentData | None = None
        self.outcome_data: OutcomeData | None = None
        self.covariate_data: CovariateData | None = None

        # Results cache
        self._causal_effect: CausalEffect | None = None

    @abc.abstractmethod
    def _fit_implementation(
        self,
        treatment: TreatmentData,
        outcome: OutcomeData,
        covariates: CovariateData | None = None,
    ) -> None:
        """Implement the specific fitting logic for this estimator."""
        pass

    @abc.abstractmethod
    def _estimate_ate_implementation(self) -> CausalEffect:
        """Implement the specific ATE estimation logic for this estimator."""
        pass

    def fit(
        self,
        treatment: TreatmentData,
        outcome: OutcomeData,
        covariates: CovariateData | None = None,
    ) -> BaseEstimator:
        """Fit the estimator to data.

        Raises:
            DataValidationError: If input data fails validation
            EstimationError: If fitting process fails
        """
        self._validate_inputs(treatment, outcome, covariates)

        self.treatment_data = treatment
        self.outcome_data = outcome
        self.covariate_data = covariates
        self._causal_effect = None

        try:
            self._fit_implementation(treatment, outcome, covariates)
            self.is_fitted = True
        except EstimationError:
            raise
        except Exception as e:
            raise EstimationError(f"Failed to fit estimator: {str(e)}") from e

        return self

    def estimate_ate(self, use_cache: bool = True) -> CausalEffect:
        """Estimate the treatment effect.

        Raises:
            EstimationError: If estimator is not fitted or estimation fails
        """
        if not self.is_fitted:
            raise EstimationError("Estimator must be fitted before estimation")

        if use_cache and self._causal_effect is not None:
            return self._causal_effect

        try:
            causal_effect = self._estimate_ate_implementation()
        except EstimationError:
            raise
        except Exception as e:
            raise EstimationError(f"Failed to estimate ATE: {str(e)}") from e

        self._causal_effect = causal_effect
        return causal_effect

    def _validate_inputs(
        self,
        treatment: TreatmentData,
        outcome: OutcomeData,
        covariates: CovariateData | None = None,
    ) -> None:
        """Validate input data for consistency."""
        if len(treatment.values) != len(outcome.values):
            raise DataValidationError(
                "Treatment and outcome must have the same number of observations"
            )

        if covariates is not None and len(covariates.values) != len(treatment.values):
            raise DataValidationError(
                "Covariates must have the same number of observations as treatment"
            )
