"""Logging setup for simulation runs."""

import logging
import sys

from shared.config import Environment, SimulationSettings


def setup_logging(settings: SimulationSettings | None = None) -> None:
    """Set up logging configuration."""
    if settings is None:
        settings = SimulationSettings()

    # Configure log level based on environment unless set explicitly
    if settings.log_level is not None:
        log_level = getattr(logging, settings.log_level)
    elif settings.environment == Environment.DEVELOPMENT:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # joblib workers are chatty at DEBUG
    logging.getLogger("joblib").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
