"""Configuration management for the simulation libraries."""

from .base import BaseConfiguration, Environment
from .simulation_config import SimulationSettings

__all__ = [
    "BaseConfiguration",
    "Environment",
    "SimulationSettings",
]
