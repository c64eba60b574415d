"""
Configuration for the Perennial CLI.

Settings come from a YAML file, then environment variables, then defaults:

    api:
      base_url: ${PERENNIAL_API_BASE_URL:http://localhost:8080}
      timeout_seconds: 10
    profile_id: null
    log_level: WARNING
    srs:
      base_interval_days: 1
      ease_multiplier: 2.5
      interval_modifier: 1.0

String values support ${VAR} and ${VAR:default} expansion. The ``srs``
section seeds the defaults for ``perennial simulate``; the saved settings
of a profile always come from the API.

Lookup order for the file: an explicit path, ./perennial.yaml,
~/.perennial/config.yaml. No file means defaults.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from perennial.core.exceptions import ConfigValidationError
from perennial.core.logging import get_logger
from perennial.srs.models import SchedulingConfig

logger = get_logger(__name__)

CONFIG_FILENAME = "perennial.yaml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_API_BASE = "http://localhost:8080"
DEFAULT_TIMEOUT_SECONDS = 10.0

# Checked in order; the first non-empty value wins.
BASE_URL_ENV_VARS = ("PERENNIAL_API_BASE_URL", "API_BASE_URL", "VITE_API_BASE_URL")


def api_base() -> str:
    """Resolve the API base URL from the environment.

    Returns:
        Base URL without a trailing slash
    """
    for name in BASE_URL_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value.rstrip("/")
    return DEFAULT_API_BASE


def default_config_paths(base_path: Optional[Path] = None) -> List[Path]:
    """Candidate config files, most specific first."""
    base_path = base_path or Path.cwd()
    return [
        base_path / CONFIG_FILENAME,
        Path.home() / ".perennial" / "config.yaml",
    ]


@dataclass
class APIConfig:
    """Where the REST API lives."""

    base_url: str = field(default_factory=api_base)
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass
class Config:
    """Top-level configuration."""

    api: APIConfig = field(default_factory=APIConfig)
    srs: SchedulingConfig = field(default_factory=SchedulingConfig)
    profile_id: Optional[str] = None
    log_level: str = "WARNING"
    source: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build a Config from parsed YAML.

        Raises:
            ConfigValidationError: If a section has the wrong shape or value
        """
        api_data = _section(data, "api")
        srs_data = _section(data, "srs")

        api = APIConfig()
        if api_data.get("base_url"):
            api.base_url = str(api_data["base_url"]).rstrip("/")
        if api_data.get("timeout_seconds") is not None:
            api.timeout_seconds = _positive_float(
                api_data["timeout_seconds"], "api.timeout_seconds"
            )

        srs = SchedulingConfig.from_payload(
            {key: _number(value, f"srs.{key}") for key, value in srs_data.items()}
        ).validate()

        profile_id = data.get("profile_id")
        return cls(
            api=api,
            srs=srs,
            profile_id=str(profile_id) if profile_id else None,
            log_level=_log_level(data.get("log_level") or "WARNING"),
        )


def expand_env_vars(value: Any) -> Any:
    """Recursively expand ${VAR} and ${VAR:default} in config values.

    Args:
        value: Configuration value (string, dict, list, or primitive)

    Returns:
        Value with all environment variables expanded
    """
    if isinstance(value, str):
        pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

        def replace_env_var(match: re.Match) -> str:
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(match.group(1), default_value)

        return re.sub(pattern, replace_env_var, value)
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def load_config(
    config_path: Optional[Path] = None, base_path: Optional[Path] = None
) -> Config:
    """
    Load configuration from YAML with environment variable overrides.

    Precedence: 1. Env vars, 2. YAML file, 3. Defaults

    Args:
        config_path: Explicit config file; must exist when given.
        base_path: Directory searched for perennial.yaml (default: cwd).

    Returns:
        Config object

    Raises:
        ConfigValidationError: Missing explicit file, bad YAML, or bad values
    """
    if config_path is not None and not config_path.exists():
        raise ConfigValidationError(
            f"Config file not found: {config_path}",
            field="config_path",
            value=str(config_path),
        )

    if config_path is None:
        config_path = next(
            (p for p in default_config_paths(base_path) if p.exists()), None
        )

    if config_path is None:
        return _apply_env_overrides(Config())

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigValidationError(
            f"Could not parse {config_path}: {e}", field="yaml", value=str(config_path)
        ) from e

    if not isinstance(data, dict):
        raise ConfigValidationError(
            f"{config_path} must contain a mapping at the top level",
            field="yaml",
            value=type(data).__name__,
        )

    config = Config.from_dict(expand_env_vars(data))
    config.source = config_path
    logger.debug("Loaded config", path=config_path)
    return _apply_env_overrides(config)


def _apply_env_overrides(config: Config) -> Config:
    """Environment variables take precedence over file values."""
    base_url = os.environ.get("PERENNIAL_API_BASE_URL")
    if base_url:
        config.api.base_url = base_url.rstrip("/")

    timeout = os.environ.get("PERENNIAL_TIMEOUT")
    if timeout:
        config.api.timeout_seconds = _positive_float(timeout, "PERENNIAL_TIMEOUT")

    profile_id = os.environ.get("PERENNIAL_PROFILE_ID")
    if profile_id:
        config.profile_id = profile_id

    log_level = os.environ.get("PERENNIAL_LOG_LEVEL")
    if log_level:
        config.log_level = _log_level(log_level)

    return config


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigValidationError(
            f"'{name}' must be a mapping", field=name, value=value
        )
    return value


def _number(value: Any, name: str) -> Any:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigValidationError(
            f"{name} must be a number, got {value!r}", field=name, value=value
        ) from None
    return int(number) if number.is_integer() and name.endswith("_days") else number


def _positive_float(value: Any, name: str) -> float:
    number = _number(value, name)
    if number is None or number <= 0:
        raise ConfigValidationError(
            f"{name} must be positive, got {value!r}", field=name, value=value
        )
    return float(number)


def _log_level(value: str) -> str:
    level = str(value).upper()
    if level not in LOG_LEVELS:
        raise ConfigValidationError(
            f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}",
            field="log_level",
            value=value,
        )
    return level
