"""Metrics collection for simulation runs."""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from shared.config import SimulationSettings


class SimulationMetrics:
    """Metrics collection for Monte Carlo and bootstrap replicates."""

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()

        self.replicates = Counter(
            "psm_simulation_replicates_total",
            "Total number of replicates by method and outcome",
            ["method", "status"],
            registry=self.registry,
        )

        self.stage_duration = Histogram(
            "psm_simulation_stage_duration_seconds",
            "Duration of simulation stages",
            ["stage", "scenario"],
            registry=self.registry,
        )

        self.standard_error = Gauge(
            "psm_simulation_standard_error",
            "Most recent standard error estimate",
            ["method", "scenario"],
            registry=self.registry,
        )

    def record_replicates(self, method: str, status: str, count: int = 1) -> None:
        """Record replicate outcomes (``ok``, ``model_fit_failure``, ``empty_group``)."""
        if count > 0:
            self.replicates.labels(method=method, status=status).inc(count)

    def record_stage(self, stage: str, scenario: str, duration: float) -> None:
        """Record the wall time of one simulation stage."""
        self.stage_duration.labels(stage=stage, scenario=scenario).observe(duration)

    def record_standard_error(self, method: str, scenario: str, value: float) -> None:
        """Record a computed standard error."""
        self.standard_error.labels(method=method, scenario=scenario).set(value)

    def replicate_count(self, method: str, status: str) -> float:
        """Read back a replicate counter value."""
        value = self.registry.get_sample_value(
            "psm_simulation_replicates_total",
            {"method": method, "status": status},
        )
        return value or 0.0


# Global metrics instance
_metrics: SimulationMetrics | None = None


def get_metrics() -> SimulationMetrics:
    """Get the global metrics instance."""
    global _metrics
    if _metrics is None:
        _metrics = SimulationMetrics()
    return _metrics


def setup_metrics(settings: SimulationSettings | None = None) -> SimulationMetrics | None:
    """Start the metrics endpoint when enabled and return the global collector."""
    if settings is None:
        settings = SimulationSettings()

    if not settings.enable_metrics:
        return None

    metrics = get_metrics()
    start_http_server(settings.metrics_port, registry=metrics.registry)
    return metrics
