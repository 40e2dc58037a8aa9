"""Simulation study configuration read from the environment."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from .base import BaseConfiguration


class SimulationSettings(BaseConfiguration):
    """Environment-driven defaults for the bootstrap simulation study.

    Every field can be overridden with a ``PSM_SIM_`` prefixed environment
    variable, e.g. ``PSM_SIM_N_BOOTSTRAP=200``.
    """

    model_config = SettingsConfigDict(env_prefix="PSM_SIM_")

    # Study size
    sample_size: int = Field(default=1000, description="Observations per dataset (n)")
    number_of_simulations: int = Field(
        default=1000, description="Monte Carlo datasets used for true variability"
    )
    n_bootstrap: int = Field(
        default=1000, description="Bootstrap replications per method (R)"
    )

    # Reproducibility and execution
    random_state: int = Field(default=42, description="Root seed for all streams")
    n_jobs: int = Field(default=1, description="Parallel workers (-1 for all cores)")
    match_order: str = Field(
        default="data", description="Treated processing order: 'data' or 'random'"
    )

    # Observability
    log_level: Optional[str] = Field(
        default=None, description="Explicit log level overriding the environment"
    )
    enable_metrics: bool = Field(default=False, description="Collect Prometheus metrics")
    metrics_port: int = Field(default=9090, description="Metrics endpoint port")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: Optional[str]) -> Optional[str]:
        """Normalise the log level name."""
        if v is None:
            return v
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return v.upper()

    def validate_configuration(self) -> list[str]:
        """Flag settings that will make the study slow or unreliable."""
        issues = super().validate_configuration()

        if self.n_bootstrap < 100:
            issues.append("Fewer than 100 bootstrap replications gives noisy SEs")
        if self.number_of_simulations < 100:
            issues.append(
                "Fewer than 100 simulations gives a noisy true-variability reference"
            )
        if self.is_production and self.n_jobs == 1:
            issues.append("Consider n_jobs=-1 for full-size runs")

        return issues
