"""Bootstrap configuration, replicate dispatch and result aggregation.

Replicates are pure functions of their own seed. Each returns a
``ReplicateOutcome`` (an estimate or a failure kind) and the outcomes are
combined afterwards, so replicates can run sequentially or through joblib
without changing the result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np
from joblib import Parallel, delayed
from pydantic import BaseModel, Field, ValidationError, field_validator

from .base import (
    FAILURE_KINDS,
    EmptyGroupError,
    InsufficientReplicatesError,
    InvalidConfiguration,
    ModelFitFailure,
    empty_failure_counts,
)

logger = logging.getLogger(__name__)

# Sample standard deviation (denominator R - 1) everywhere
DDOF: int = 1

# Fewest successful replicates with a defined standard deviation
MIN_REPLICATES: int = DDOF + 1


class BootstrapConfig(BaseModel):
    """Configuration for bootstrap standard errors.

    Attributes:
        n_samples: Number of bootstrap replications (R)
        confidence_level: Coverage of the percentile interval
        random_state: Seed for the replicate streams
        n_jobs: joblib workers; 1 runs sequentially, -1 uses all cores
    """

    n_samples: int = Field(default=1000, description="Bootstrap replications R")
    confidence_level: float = Field(
        default=0.95, gt=0.0, lt=1.0, description="Percentile interval coverage"
    )
    random_state: Optional[int] = Field(
        default=None, description="Seed for replicate streams"
    )
    n_jobs: int = Field(default=1, description="Parallel workers (-1 for all cores)")

    @field_validator("n_samples")
    @classmethod
    def validate_n_samples(cls, v: int) -> int:
        """Validate R leaves a defined standard deviation."""
        return validate_replicate_count(v, "n_samples")

    @field_validator("n_jobs")
    @classmethod
    def validate_n_jobs(cls, v: int) -> int:
        """Validate n_jobs is positive or -1."""
        if v == 0 or v < -1:
            raise ValueError("n_jobs must be a positive integer or -1")
        return v


def validate_replicate_count(value: int, name: str) -> int:
    """Reject replicate counts too small for a standard deviation with denominator R - 1."""
    if value < MIN_REPLICATES:
        raise ValueError(
            f"{name} must be at least {MIN_REPLICATES}: the standard deviation "
            f"uses denominator R - 1, got {value}"
        )
    return value


def build_bootstrap_config(**kwargs: Any) -> BootstrapConfig:
    """Build a BootstrapConfig, reporting bad values as InvalidConfiguration."""
    try:
        return BootstrapConfig(**kwargs)
    except ValidationError as e:
        raise InvalidConfiguration(f"Invalid bootstrap configuration: {e}") from e


@dataclass(frozen=True)
class ReplicateOutcome:
    """Result of one replicate: an estimate, or the kind of failure that skipped it."""

    estimate: float | None = None
    failure: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None


def failure_kind(error: Exception) -> str:
    """Counter key for a skippable failure."""
    for error_type, kind in FAILURE_KINDS.items():
        if isinstance(error, error_type):
            return kind
    raise TypeError(f"{type(error).__name__} is not a skippable failure")


def run_guarded(compute: Callable[[], float], label: str = "replicate") -> ReplicateOutcome:
    """Run one replicate, converting skippable failures into a counted outcome.

    Only ``ModelFitFailure`` and ``EmptyGroupError`` are caught; anything else
    propagates and aborts the run.
    """
    try:
        return ReplicateOutcome(estimate=compute())
    except (ModelFitFailure, EmptyGroupError) as e:
        kind = failure_kind(e)
        logger.debug("Skipping %s (%s): %s", label, kind, e)
        return ReplicateOutcome(failure=kind)


def run_replicates(
    replicate: Callable[[np.random.SeedSequence], ReplicateOutcome],
    seeds: Sequence[np.random.SeedSequence],
    n_jobs: int = 1,
) -> list[ReplicateOutcome]:
    """Evaluate ``replicate`` once per seed, preserving seed order."""
    if n_jobs == 1:
        return [replicate(seed) for seed in seeds]
    return list(Parallel(n_jobs=n_jobs)(delayed(replicate)(seed) for seed in seeds))


@dataclass(frozen=True)
class ReplicateSummary:
    """Successful estimates, their standard deviation, and skip counts."""

    estimates: tuple[float, ...]
    standard_deviation: float
    skipped: dict[str, int] = field(default_factory=empty_failure_counts)

    @property
    def n_successful(self) -> int:
        return len(self.estimates)

    @property
    def n_skipped(self) -> int:
        return sum(self.skipped.values())


def summarize_replicates(
    outcomes: Sequence[ReplicateOutcome], label: str = "bootstrap"
) -> ReplicateSummary:
    """Combine replicate outcomes into a standard deviation with skip counts.

    Raises:
        InsufficientReplicatesError: If fewer than two replicates succeeded
    """
    skipped = empty_failure_counts()
    estimates = []
    for outcome in outcomes:
        if outcome.succeeded:
            estimates.append(float(outcome.estimate))
        else:
            skipped[outcome.failure] += 1

    if len(estimates) < MIN_REPLICATES:
        raise InsufficientReplicatesError(
            f"{label}: only {len(estimates)} of {len(outcomes)} replicates succeeded "
            f"(skipped: {skipped}); at least two are needed for a standard deviation."
        )

    n_skipped = sum(skipped.values())
    if n_skipped > 0:
        logger.warning(
            "%s: skipped %d of %d replicates (%s)",
            label,
            n_skipped,
            len(outcomes),
            ", ".join(f"{k}={v}" for k, v in skipped.items()),
        )

    return ReplicateSummary(
        estimates=tuple(estimates),
        standard_deviation=float(np.std(estimates, ddof=DDOF)),
        skipped=skipped,
    )


@dataclass(frozen=True)
class BootstrapResult:
    """Outcome of one bootstrap run.

    Attributes:
        method: 'simple' or 'complex'
        estimates: Successful replicate estimates, in replicate order
        standard_error: Sample standard deviation of ``estimates``
        n_requested: Replications attempted (R)
        skipped: Skipped replicates by failure kind
        confidence_level: Coverage of the percentile interval
    """

    method: str
    estimates: tuple[float, ...]
    standard_error: float
    n_requested: int
    skipped: dict[str, int] = field(default_factory=empty_failure_counts)
    confidence_level: float = 0.95

    @classmethod
    def from_outcomes(
        cls,
        method: str,
        outcomes: Sequence[ReplicateOutcome],
        confidence_level: float = 0.95,
    ) -> BootstrapResult:
        summary = summarize_replicates(outcomes, label=f"{method} bootstrap")
        return cls(
            method=method,
            estimates=summary.estimates,
            standard_error=summary.standard_deviation,
            n_requested=len(outcomes),
            skipped=summary.skipped,
            confidence_level=confidence_level,
        )

    @property
    def n_successful(self) -> int:
        return len(self.estimates)

    @property
    def n_skipped(self) -> int:
        return sum(self.skipped.values())

    @property
    def ci_lower(self) -> float:
        """Lower percentile bound."""
        alpha = 1 - self.confidence_level
        return float(np.percentile(self.estimates, 100 * alpha / 2))

    @property
    def ci_upper(self) -> float:
        """Upper percentile bound."""
        alpha = 1 - self.confidence_level
        return float(np.percentile(self.estimates, 100 * (1 - alpha / 2)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "standard_error": self.standard_error,
            "n_requested": self.n_requested,
            "n_successful": self.n_successful,
            "n_skipped": self.n_skipped,
            "skipped": dict(self.skipped),
            "ci_lower": self.ci_lower,
            "ci_upper": self.ci_upper,
            "confidence_level": self.confidence_level,
        }
