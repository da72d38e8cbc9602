"""Migration configuration.

This module defines the immutable :class:`MigrationConfig` dataclass that
carries the options controlling a migration run, with helpers to build it
from dictionaries (for example a loaded YAML configuration file) and to
validate it.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any

from .exceptions import ConfigurationError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class MigrationConfig:
    """Migration behavior configuration.

    This dataclass centralizes options that control how expectation blocks
    are rewritten and how results are written. It is serializable so
    callers can construct it from dictionaries or configuration files.
    """

    # Behavior settings
    dry_run: bool = False
    fail_fast: bool = False

    # Output settings
    # Suffix appended to target filename stem (default: '' rewrites in place)
    target_suffix: str = ""
    format_output: bool = False
    """Whether to format output code with isort and black"""
    line_length: int | None = 120

    # Type information
    types_file: str | None = None
    """YAML file mapping expression source text to resolved types"""

    # Idiom settings
    expectations_module: str = "mockit"
    """Module the ``Expectations`` marker is imported from"""
    stub_module: str = "mockito"
    """Module providing ``when``, ``verify``, ``times`` and the matchers"""

    # Logging and reporting settings
    log_level: str = "INFO"
    """Default logging level (DEBUG, INFO, WARNING, ERROR)"""

    def with_override(self, **kwargs: Any) -> "MigrationConfig":
        """Return a new ``MigrationConfig`` with specified overrides.

        Args:
            **kwargs: Configuration values to override on the returned
                instance.

        Returns:
            A new ``MigrationConfig`` with the provided overrides
            applied.
        """
        return dataclasses.replace(self, **kwargs)

    def validate(self) -> None:
        """Validate the configuration.

        Raises:
            ConfigurationError: If configuration is invalid.
        """
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.log_level}", config_key="log_level")
        if self.line_length is not None and not 40 <= self.line_length <= 400:
            raise ConfigurationError(f"line_length must be between 40 and 400, got {self.line_length}", "line_length")
        for key in ("expectations_module", "stub_module"):
            value = getattr(self, key)
            if not value or not all(part.isidentifier() for part in value.split(".")):
                raise ConfigurationError(f"{key} must be a dotted module name, got {value!r}", config_key=key)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "MigrationConfig":
        """Create config from dictionary.

        Unknown keys are ignored so configuration files may carry comments
        or options for other tools.

        Args:
            config_dict: Dictionary containing configuration values.

        Returns:
            New ``MigrationConfig`` instance.

        Raises:
            ConfigurationError: If configuration is invalid.
        """
        filtered = {k: v for k, v in config_dict.items() if k in cls.__dataclass_fields__}
        config = cls(**filtered)
        config.validate()
        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary.

        Returns:
            Dictionary representation of config.
        """
        return dataclasses.asdict(self)
