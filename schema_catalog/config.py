"""
Configuration management for the schema catalog.

All configuration is done via environment variables - no config files.
This module provides typed configuration classes with validation.

Invariants:
    - All settings have sensible defaults for local development
    - The resolution core never reads configuration; only the catalog
      validation layer and logging setup do

How to change safely:
    - Add new settings with defaults that maintain backward compatibility
    - Never make the core's unknown-parent policy configurable; strictness
      belongs in ValidationConfig
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

LOG_FORMATS = ("text", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationConfig:
    """Whole-catalog validation configuration.

    Attributes:
        unknown_parents_are_errors: Report parents missing from the catalog
            as validation errors instead of logging a warning
    """

    unknown_parents_are_errors: bool = False

    @classmethod
    def from_env(cls) -> ValidationConfig:
        """Load configuration from environment variables."""
        return cls(
            unknown_parents_are_errors=os.getenv("SCHEMA_STRICT_PARENTS", "false").lower()
            == "true",
        )


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log format (json, text)
    """

    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls) -> ObservabilityConfig:
        """Load configuration from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "text"),
        )


@dataclass
class CatalogConfig:
    """Complete catalog configuration.

    Attributes:
        validation: Catalog validation configuration
        observability: Logging configuration
    """

    validation: ValidationConfig = field(default_factory=ValidationConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @classmethod
    def from_env(cls) -> CatalogConfig:
        """Load complete configuration from environment variables.

        Raises:
            ValueError: If configuration is invalid.
        """
        config = cls(
            validation=ValidationConfig.from_env(),
            observability=ObservabilityConfig.from_env(),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration consistency.

        Raises:
            ValueError: If configuration is invalid.
        """
        if self.observability.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"Invalid LOG_LEVEL '{self.observability.log_level}'. "
                f"Must be one of: {', '.join(LOG_LEVELS)}"
            )
        if self.observability.log_format.lower() not in LOG_FORMATS:
            raise ValueError(
                f"Invalid LOG_FORMAT '{self.observability.log_format}'. "
                f"Must be one of: {', '.join(LOG_FORMATS)}"
            )

    def log_config(self) -> None:
        """Log the effective configuration."""
        logger.info(
            "Catalog configuration loaded",
            extra={
                "strict_parents": self.validation.unknown_parents_are_errors,
                "log_level": self.observability.log_level,
                "log_format": self.observability.log_format,
            },
        )
