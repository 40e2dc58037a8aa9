"""Logistic propensity model.

Fits a maximum-likelihood logistic regression of treatment on covariates
with scikit-learn and exposes fitted probabilities for arbitrary rows.
Degenerate fits are surfaced as ``ModelFitFailure`` rather than returning
NaN scores.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from sklearn.linear_model import LogisticRegression

from ..core.base import Dataset, ModelFitFailure

logger = logging.getLogger(__name__)


class LogisticPropensityModel:
    """Unpenalized logistic regression of treatment on covariates.

    Attributes:
        model: Fitted sklearn LogisticRegression, or None before ``fit``
        feature_names: Covariate columns used in the fit
    """

    def __init__(self, model_params: dict[str, Any] | None = None) -> None:
        """Initialize the propensity model.

        Args:
            model_params: Overrides for the sklearn LogisticRegression arguments
        """
        self.model_params = model_params or {}
        self.model: LogisticRegression | None = None
        self.feature_names: list[str] | None = None

    def _create_model(self) -> LogisticRegression:
        default_params = {
            # Infinite C disables the penalty
            "C": np.inf,
            "solver": "lbfgs",
            "max_iter": 1000,
        }
        merged_params = {**default_params, **self.model_params}
        return LogisticRegression(**merged_params)

    def fit(self, dataset: Dataset) -> LogisticPropensityModel:
        """Fit the model on a dataset's treatment and covariates.

        Raises:
            ModelFitFailure: If treatment has no variation or the solver fails
        """
        y = dataset.treatment_values
        unique_treatments = np.unique(y)
        if len(unique_treatments) < 2:
            raise ModelFitFailure(
                f"No treatment variation detected. Treatment values: {unique_treatments}. "
                "Cannot estimate propensity scores without variation in treatment assignment."
            )

        X = pd.DataFrame(dataset.covariate_matrix, columns=dataset.covariate_names)
        self.feature_names = list(X.columns)
        model = self._create_model()

        try:
            model.fit(X, y)
        except Exception as e:
            raise ModelFitFailure(f"Failed to fit propensity model: {str(e)}") from e

        self.model = model
        logger.debug(
            "Fitted propensity model on %d rows: intercept=%.4f coef=%s",
            dataset.n_observations,
            self.intercept,
            np.round(self.coefficients, 4).tolist(),
        )
        return self

    def predict(self, covariates: pd.DataFrame | NDArray[Any]) -> NDArray[np.float64]:
        """Predicted probability of treatment for each covariate row.

        Raises:
            ModelFitFailure: If the model is unfitted or produces non-finite scores
        """
        if self.model is None or self.feature_names is None:
            raise ModelFitFailure("Propensity model must be fitted before prediction")

        X = pd.DataFrame(np.asarray(covariates, dtype=float), columns=self.feature_names)
        scores = self.model.predict_proba(X)[:, 1]

        if not np.all(np.isfinite(scores)):
            raise ModelFitFailure("Propensity model produced non-finite scores")
        return np.asarray(scores, dtype=float)

    def score(self, dataset: Dataset) -> NDArray[np.float64]:
        """Propensity score for every row of ``dataset``."""
        return self.predict(dataset.covariate_matrix)

    def fit_score(self, dataset: Dataset) -> NDArray[np.float64]:
        """Fit on ``dataset`` and score the same rows."""
        return self.fit(dataset).score(dataset)

    @property
    def coefficients(self) -> NDArray[np.float64]:
        if self.model is None:
            raise ModelFitFailure("Propensity model has not been fitted")
        return np.asarray(self.model.coef_[0], dtype=float)

    @property
    def intercept(self) -> float:
        if self.model is None:
            raise ModelFitFailure("Propensity model has not been fitted")
        return float(self.model.intercept_[0])
