"""Tests for environment settings, logging and metrics setup."""

import logging

import pytest
from pydantic import ValidationError

from shared.config import Environment, SimulationSettings
from shared.observability import SimulationMetrics, setup_logging, setup_metrics


class TestSimulationSettings:
    """Test env-driven settings."""

    def test_defaults(self):
        """Defaults match the full-size study."""
        settings = SimulationSettings()

        assert settings.sample_size == 1000
        assert settings.number_of_simulations == 1000
        assert settings.n_bootstrap == 1000
        assert settings.random_state == 42
        assert settings.enable_metrics is False

    def test_env_prefix(self, monkeypatch):
        """Fields are read from PSM_SIM_ variables."""
        monkeypatch.setenv("PSM_SIM_NUMBER_OF_SIMULATIONS", "50")
        monkeypatch.setenv("PSM_SIM_RANDOM_STATE", "7")
        monkeypatch.setenv("PSM_SIM_ENVIRONMENT", "production")

        settings = SimulationSettings()

        assert settings.number_of_simulations == 50
        assert settings.random_state == 7
        assert settings.environment == Environment.PRODUCTION

    def test_log_level_normalised(self):
        """Log level names are upper-cased and checked."""
        assert SimulationSettings(log_level="warning").log_level == "WARNING"

        with pytest.raises(ValidationError):
            SimulationSettings(log_level="chatty")

    def test_validate_configuration_flags_small_studies(self):
        """Small studies produce warnings, not errors."""
        issues = SimulationSettings(
            n_bootstrap=10, number_of_simulations=10
        ).validate_configuration()

        assert len(issues) == 2

    def test_production_sequential_warning(self):
        """Full-size production runs are nudged towards parallelism."""
        settings = SimulationSettings(environment=Environment.PRODUCTION)

        assert settings.is_production
        assert settings.validate_configuration() == [
            "Consider n_jobs=-1 for full-size runs"
        ]

    def test_to_dict(self):
        """Settings serialise to a plain dictionary."""
        data = SimulationSettings().to_dict()

        assert data["n_bootstrap"] == 1000
        assert data["environment"] == "development"

    def test_log_summary(self, caplog):
        """Settings and warnings are logged."""
        logger = logging.getLogger("psm_bootstrap.settings")
        settings = SimulationSettings(n_bootstrap=10)

        with caplog.at_level(logging.INFO, logger="psm_bootstrap.settings"):
            settings.log_summary(logger)

        assert "n_bootstrap = 10" in caplog.text
        assert any(record.levelno == logging.WARNING for record in caplog.records)


class TestObservabilitySetup:
    """Test logging and metrics setup."""

    def test_explicit_log_level(self):
        """An explicit log level wins over the environment default."""
        setup_logging(SimulationSettings(log_level="ERROR"))

        assert logging.getLogger().level == logging.ERROR
        assert logging.getLogger("joblib").level == logging.WARNING

    def test_environment_log_level(self):
        """Non-development environments log at INFO."""
        setup_logging(SimulationSettings(environment=Environment.TESTING))

        assert logging.getLogger().level == logging.INFO

    def test_metrics_disabled_by_default(self):
        """No endpoint is started unless metrics are enabled."""
        assert setup_metrics(SimulationSettings()) is None

    def test_private_registries_are_independent(self):
        """Each collector keeps its own counts."""
        first = SimulationMetrics()
        second = SimulationMetrics()
        first.record_replicates("simple", "ok", 3)
        second.record_replicates("simple", "ok", 0)

        assert first.replicate_count("simple", "ok") == 3
        assert second.replicate_count("simple", "ok") == 0
