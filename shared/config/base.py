"""Base settings shared by the simulation libraries.

Settings are read from the process environment and an optional ``.env``
file. Subclasses add their own fields and an ``env_prefix``.
"""

import logging
from enum import Enum
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Where a study is being run."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class BaseConfiguration(BaseSettings):
    """Environment-driven settings with a review hook for risky values."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Where the study is being run",
    )

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-compatible view of the settings."""
        return self.model_dump(mode="json")

    def validate_configuration(self) -> list[str]:
        """Return human-readable warnings about the current settings."""
        return []

    def log_summary(self, logger: logging.Logger) -> None:
        """Log every setting, then every warning from ``validate_configuration``."""
        for key, value in sorted(self.to_dict().items()):
            logger.info("%s = %s", key, value)
        for issue in self.validate_configuration():
            logger.warning(issue)
