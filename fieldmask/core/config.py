"""Library configuration loaded from YAML files or environment variables."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .catalog import StrategyCatalog
from .exceptions import ConfigurationError
from .policies import MaskPolicy

logger = logging.getLogger(__name__)

_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format (json or text)")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _VALID_LEVELS:
            raise ValueError(f"Invalid log level '{v}'. Valid levels: {sorted(_VALID_LEVELS)}")
        return level

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in {"json", "text"}:
            raise ValueError(f"Invalid log format '{v}'. Use 'json' or 'text'")
        return v


class PolicyConfig(BaseModel):
    """Default policy applied by engines built from configuration."""

    overrides: dict[str, str] = Field(default_factory=dict)
    disable_masking: bool = Field(default=False)

    def to_policy(self) -> MaskPolicy:
        return MaskPolicy(overrides=self.overrides, disable_masking=self.disable_masking)


class MaskingConfig(BaseModel):
    """Main configuration for fieldmask engines."""

    aliases: dict[str, str] = Field(
        default_factory=dict, description="Extra group aliases (alias -> target strategy)"
    )
    strict_declarations: bool = Field(
        default=False,
        description="Reject record types whose declarations name unknown strategies",
    )
    default_policy: PolicyConfig = Field(default_factory=PolicyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, config_path: Path | str) -> MaskingConfig:
        """Load configuration from a YAML file.

        The settings may sit under a top-level ``fieldmask:`` key or at the
        document root.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}", config_file=str(config_path)
            )

        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}", config_file=str(config_path)
            ) from e

        if not isinstance(config_data, dict):
            raise ConfigurationError(
                "Configuration root must be a mapping", config_file=str(config_path)
            )

        section = config_data.get("fieldmask", config_data)
        if section is None:
            # "fieldmask:" with nothing under it
            section = {}
        if not isinstance(section, dict):
            raise ConfigurationError(
                f"The fieldmask section must be a mapping, got {type(section).__name__}",
                config_file=str(config_path),
                config_section="fieldmask",
            )
        try:
            config = cls(**section)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e}",
                config_file=str(config_path),
                config_section="fieldmask",
            ) from e

        logger.info(f"Loaded fieldmask configuration from {config_path}")
        return config

    @classmethod
    def from_env(cls) -> MaskingConfig:
        """Load configuration from environment variables.

        Environment Variables:
            FIELDMASK_LOG_LEVEL: Log level (DEBUG|INFO|WARNING|ERROR|CRITICAL)
            FIELDMASK_LOG_FORMAT: Log format (json|text)
            FIELDMASK_DISABLE_MASKING: Disable masking by default (true|false)
            FIELDMASK_STRICT_DECLARATIONS: Validate declarations strictly (true|false)
        """
        try:
            return cls(
                strict_declarations=_env_bool("FIELDMASK_STRICT_DECLARATIONS", False),
                default_policy=PolicyConfig(
                    disable_masking=_env_bool("FIELDMASK_DISABLE_MASKING", False)
                ),
                logging=LoggingConfig(
                    level=os.getenv("FIELDMASK_LOG_LEVEL", "INFO").strip(),
                    format=os.getenv("FIELDMASK_LOG_FORMAT", "json").strip(),
                ),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid environment configuration: {e}") from e

    def build_catalog(self) -> StrategyCatalog:
        """Create a built-in catalog extended with the configured aliases."""
        return StrategyCatalog.with_builtins(aliases=self.aliases)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()


def _env_bool(key: str, default: bool) -> bool:
    """Read a boolean flag; anything but 'true'/'false' keeps the default."""
    value = os.getenv(key)
    if value is None:
        return default
    cleaned = value.strip().lower()
    if cleaned == "true":
        return True
    if cleaned == "false":
        return False
    logger.warning(f"Environment variable {key}={value!r} is not a boolean, using {default}")
    return default


# Global configuration instance, loaded lazily to support testing
_config: MaskingConfig | None = None


def get_config() -> MaskingConfig:
    """Get the global configuration, loading it from the environment if needed."""
    global _config
    if _config is None:
        _config = MaskingConfig.from_env()
    return _config


def set_config(config: MaskingConfig) -> None:
    """Set the global configuration."""
    global _config
    _config = config


def load_config(config_path: Path | str | None = None) -> MaskingConfig:
    """Load and set the global configuration."""
    if config_path:
        config = MaskingConfig.from_file(config_path)
    else:
        config = MaskingConfig.from_env()
    set_config(config)
    return config


def reset_config() -> None:
    """Reset the global configuration for testing purposes."""
    global _config
    _config = None
