"""Core data models, errors and bootstrap machinery."""

from .base import (
    SCENARIOS,
    BaseEstimator,
    CausalEffect,
    CausalInferenceError,
    CovariateData,
    DataValidationError,
    Dataset,
    EmptyGroupError,
    EstimationError,
    InsufficientReplicatesError,
    InvalidConfiguration,
    MatchedDataset,
    ModelFitFailure,
    OutcomeData,
    TreatmentData,
)
from .bootstrap import (
    BootstrapConfig,
    BootstrapResult,
    ReplicateOutcome,
    build_bootstrap_config,
)

__all__ = [
    "SCENARIOS",
    "BaseEstimator",
    "CausalEffect",
    "Dataset",
    "MatchedDataset",
    "TreatmentData",
    "OutcomeData",
    "CovariateData",
    "CausalInferenceError",
    "DataValidationError",
    "InvalidConfiguration",
    "EstimationError",
    "ModelFitFailure",
    "EmptyGroupError",
    "InsufficientReplicatesError",
    "BootstrapConfig",
    "BootstrapResult",
    "ReplicateOutcome",
    "build_bootstrap_config",
]
