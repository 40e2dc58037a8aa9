"""Logging and metrics setup shared across libraries."""

from .logging import get_logger, setup_logging
from .metrics import SimulationMetrics, get_metrics, setup_metrics

__all__ = [
    "SimulationMetrics",
    "get_logger",
    "get_metrics",
    "setup_logging",
    "setup_metrics",
]
