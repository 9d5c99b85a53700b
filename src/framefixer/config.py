"""
framefixer Configuration
========================

This module handles configuration loading for the frame scheduler.

Configuration Sources (in order of precedence):
    1. Explicit overrides (command-line flags)
    2. Environment variables
    3. config.yaml file
    4. Default values (lowest priority)

Environment Variable Mapping:
    FRAMEFIXER_BUFFER_SIZE        -> scheduler.buffer_size
    FRAMEFIXER_COMPARISON_SCALE   -> scheduler.comparison_scale
    FRAMEFIXER_ADJUSTMENT_BOUND   -> scheduler.adjustment_bound
    FRAMEFIXER_DUPLICATE_COUNT    -> scheduler.duplicate_count
    FRAMEFIXER_THRESHOLD_STRICT   -> scheduler.threshold_strict
    FRAMEFIXER_THRESHOLD_RELAXED  -> scheduler.threshold_relaxed
    FRAMEFIXER_PROGRESS_INTERVAL  -> progress.interval_seconds
    FRAMEFIXER_LOG_LEVEL          -> logging.level

Non-positive scheduler values are never fatal: the offending option is
reported with a warning and its default is used instead.

Example:
    from framefixer.config import load_config, setup_logging

    settings = load_config("config.yaml", overrides={"buffer_size": 9})
    setup_logging(settings)
    print(settings.scheduler.relaxed_threshold)
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationInfo, field_validator


logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when a configuration value cannot be parsed at all."""
    pass


# =============================================================================
# Configuration Models
# =============================================================================

_INTEGER_OPTIONS = ("buffer_size", "comparison_scale", "adjustment_bound", "duplicate_count")


class SchedulerConfig(BaseModel):
    """Frame scheduling parameters."""

    buffer_size: int = Field(
        default=7,
        description="Distinct frames considered when adjusting repeat counts",
    )
    comparison_scale: int = Field(
        default=4,
        description="Factor by which frames are reduced for matching (1 disables)",
    )
    adjustment_bound: int = Field(
        default=5,
        description="Maximum tolerated drift between output and input positions",
    )
    duplicate_count: int = Field(
        default=2,
        description="Repeats a frame needs to survive downstream downsampling",
    )
    threshold_strict: float = Field(
        default=0.5,
        description="Dissimilarity cutoff while the open frame is below target",
    )
    threshold_relaxed: Optional[float] = Field(
        default=None,
        description="Cutoff once the open frame reached target (default strict / 2)",
    )

    @field_validator("*", mode="before")
    @classmethod
    def _substitute_non_positive(cls, value: Any, info: ValidationInfo) -> Any:
        """Replace non-positive values with the option default and warn."""
        if value is None:
            return value
        if isinstance(value, bool):
            raise ConfigurationError(f"{info.field_name} must be numeric, got {value!r}")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Unable to parse {info.field_name}={value!r} as a number"
            )

        if number <= 0:
            default = cls.model_fields[info.field_name].default
            logger.warning(
                f"All options must be positive values, using default value "
                f"for {info.field_name} ({default}) instead of {value!r}"
            )
            return default

        # Integer options truncate fractional input
        if info.field_name in _INTEGER_OPTIONS:
            truncated = int(number)
            if truncated <= 0:
                default = cls.model_fields[info.field_name].default
                logger.warning(
                    f"{info.field_name}={value!r} truncates to {truncated}, "
                    f"using default value {default}"
                )
                return default
            return truncated
        return number

    @property
    def relaxed_threshold(self) -> float:
        """Relaxed cutoff, half of strict unless given explicitly."""
        if self.threshold_relaxed is None:
            return 0.5 * self.threshold_strict
        return self.threshold_relaxed


class ProgressConfig(BaseModel):
    """Progress reporting configuration."""

    enabled: bool = Field(default=True, description="Log periodic progress lines")
    interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Wall time between progress lines",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for framefixer.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values, and explicit
    overrides take precedence over both.
    """

    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    progress: ProgressConfig = Field(default_factory=ProgressConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def read_config_data(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Merge YAML file, environment variables and overrides without validating.

    Priority (highest to lowest):
        1. Explicit scheduler overrides
        2. Environment variables
        3. YAML config file
        4. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.
        overrides: Scheduler option overrides (None values are ignored)

    Returns:
        Raw nested config data, ready for Settings.model_validate

    Raises:
        ConfigurationError: If the file is malformed
    """
    # Find config file
    if config_path is None:
        for path in (Path("framefixer.yaml"), Path("config.yaml")):
            if path.exists():
                config_path = str(path)
                break

    # Load from YAML if exists
    config_data: Dict[str, Any] = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            try:
                config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {config_path}: {e}")
        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    elif config_path:
        logger.warning(f"Config file {config_path} not found, using defaults")

    # Apply environment variable overrides
    _apply_env_overrides(config_data)

    # Apply explicit overrides
    if overrides:
        scheduler_data = config_data.setdefault("scheduler", {})
        for key, value in overrides.items():
            if value is not None:
                scheduler_data[key] = value

    return config_data


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """
    Load and validate configuration. See read_config_data for precedence.

    Raises:
        ConfigurationError: If the file is malformed or a value is unparseable
    """
    return Settings.model_validate(read_config_data(config_path, overrides))


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Scheduler settings
    for option in (
        "buffer_size",
        "comparison_scale",
        "adjustment_bound",
        "duplicate_count",
        "threshold_strict",
        "threshold_relaxed",
    ):
        if env_value := os.environ.get(f"FRAMEFIXER_{option.upper()}"):
            config_data.setdefault("scheduler", {})[option] = env_value

    # Progress settings
    if env_interval := os.environ.get("FRAMEFIXER_PROGRESS_INTERVAL"):
        config_data.setdefault("progress", {})["interval_seconds"] = float(env_interval)

    # Logging settings
    if env_log := os.environ.get("FRAMEFIXER_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
