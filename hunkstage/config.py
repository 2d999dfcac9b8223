"""Configuration management for hunkstage.

Handles user-level configuration stored in ~/.hunkstage/config.yaml.
Every key can be overridden by a HUNKSTAGE_* environment variable.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator


class ConfigError(Exception):
    """Raised when there's an error with the configuration."""
    pass


_CONFIG_DIR = Path.home() / ".hunkstage"

# Config key -> environment variable
ENV_OVERRIDES = {
    "git_binary": "HUNKSTAGE_GIT_BINARY",
    "status_limit": "HUNKSTAGE_STATUS_LIMIT",
    "max_diff_size": "HUNKSTAGE_MAX_DIFF_SIZE",
    "log_level": "HUNKSTAGE_LOG_LEVEL",
    "log_format": "HUNKSTAGE_LOG_FORMAT",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")


class HunkstageConfig(BaseModel):
    """Validated hunkstage configuration."""

    git_binary: str = "git"
    status_limit: Optional[int] = None  # None means no limit
    max_diff_size: int = 3_000_000  # Characters; larger diffs are LARGE_TEXT
    log_level: str = "WARNING"
    log_format: str = "console"

    @field_validator("status_limit")
    @classmethod
    def check_status_limit(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("status_limit must be non-negative")
        return value

    @field_validator("max_diff_size")
    @classmethod
    def check_max_diff_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_diff_size must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return value

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
        return value


def get_config_dir() -> Path:
    """Get the hunkstage configuration directory.

    Returns:
        Path to ~/.hunkstage/
    """
    return _CONFIG_DIR


def get_config_file_path() -> Path:
    """Get path to config.yaml file.

    Returns:
        Path to ~/.hunkstage/config.yaml
    """
    return get_config_dir() / "config.yaml"


def _read_config_file(config_file: Path) -> Dict[str, Any]:
    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config from {config_file}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_file} must contain a mapping")
    return data


def _env_overrides() -> Dict[str, str]:
    overrides = {}
    for key, env_var in ENV_OVERRIDES.items():
        value = os.environ.get(env_var, "").strip()
        if value:
            overrides[key] = value
    return overrides


def load_config(config_file: Optional[Path] = None) -> HunkstageConfig:
    """Load configuration from the config file and the environment.

    Environment variables take precedence over the file. A missing file
    yields the defaults.

    Args:
        config_file: Config file to read (defaults to ~/.hunkstage/config.yaml).

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the file cannot be read or a value is invalid.
    """
    data = _read_config_file(config_file or get_config_file_path())
    data.update(_env_overrides())

    try:
        return HunkstageConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}")


def save_config(config: HunkstageConfig, config_file: Optional[Path] = None) -> None:
    """Save configuration to the config file.

    Args:
        config: Configuration to save.
        config_file: Destination (defaults to ~/.hunkstage/config.yaml).
    """
    config_file = config_file or get_config_file_path()

    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w") as f:
            yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise ConfigError(f"Failed to save config to {config_file}: {e}")
