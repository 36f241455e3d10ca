"""Configuration loading for the remote sampler.

Settings are merged from several sources, later ones winning:

1. Defaults on ``SamplerConfig``
2. A ``remotesampler.toml`` file (``[sampler]`` table)
3. ``REMOTE_SAMPLER_*`` environment variables
4. Explicit keyword overrides
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from remotesampler.errors import ConfigError
from remotesampler.fetcher import DEFAULT_ENDPOINT
from remotesampler.poller import DEFAULT_POLLING_INTERVAL


CONFIG_FILE_NAME = "remotesampler.toml"
ENV_PREFIX = "REMOTE_SAMPLER_"
DEFAULT_SAMPLING_RATE = 0.001

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

# env var suffix -> (config key, converter name)
_ENV_VARS = {
    "SERVICE_NAME": ("service_name", "str"),
    "ENDPOINT": ("endpoint", "str"),
    "POLLING_INTERVAL": ("polling_interval", "float"),
    "INITIAL_SAMPLING_RATE": ("initial_sampling_rate", "float"),
    "FETCH_TIMEOUT": ("fetch_timeout", "float"),
    "DEBUG": ("debug", "bool"),
}


class SamplerConfig(BaseModel):
    """Validated remote sampler settings."""

    service_name: str = Field(min_length=1)
    endpoint: str = DEFAULT_ENDPOINT
    polling_interval: float = Field(default=DEFAULT_POLLING_INTERVAL, gt=0)
    initial_sampling_rate: float = Field(default=DEFAULT_SAMPLING_RATE, ge=0.0, le=1.0)
    operation_overrides: Dict[str, float] = Field(default_factory=dict)
    fetch_timeout: float = Field(default=10.0, gt=0)
    debug: bool = False

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("endpoint must be an http(s) URL")
        return value

    @field_validator("operation_overrides")
    @classmethod
    def _check_overrides(cls, value: Dict[str, float]) -> Dict[str, float]:
        for operation, rate in value.items():
            if not operation:
                raise ValueError("operation override names must be non-empty")
            if not 0.0 <= rate <= 1.0:
                raise ValueError(f"sampling rate for operation '{operation}' must be between 0.0 and 1.0")
        return value


def find_config_file() -> Optional[str]:
    """Return the first config file found in the current or home directory."""
    for directory in (Path.cwd(), Path.home()):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return str(candidate)
    return None


def load_toml_config(path: str) -> Dict[str, Any]:
    """
    Load the ``[sampler]`` table of a TOML file.

    Returns an empty dict if the file does not exist.

    Raises:
        ConfigError: if the file is not valid TOML
    """
    config_path = Path(path)
    if not config_path.is_file():
        return {}
    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError("invalid TOML config file", {"path": path, "error": e}) from e

    section = data.get("sampler", {})
    if not isinstance(section, dict):
        raise ConfigError("[sampler] must be a table", {"path": path})
    return dict(section)


def load_config_from_env() -> Dict[str, Any]:
    """
    Read ``REMOTE_SAMPLER_*`` environment variables.

    Unset variables are omitted from the result.

    Raises:
        ConfigError: if a variable cannot be converted to its type
    """
    result: Dict[str, Any] = {}
    for suffix, (key, kind) in _ENV_VARS.items():
        raw = os.environ.get(ENV_PREFIX + suffix)
        if raw is None or raw == "":
            continue
        result[key] = _convert(ENV_PREFIX + suffix, raw, kind)
    return result


def _convert(name: str, raw: str, kind: str) -> Any:
    if kind == "float":
        try:
            return float(raw)
        except ValueError as e:
            raise ConfigError("environment variable must be a number", {"name": name, "value": raw}) from e
    if kind == "bool":
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigError("environment variable must be a boolean", {"name": name, "value": raw})
    return raw


def load_config_with_priority(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Merge config file, environment and explicit overrides.

    Overrides whose value is None are ignored so callers can pass their
    keyword arguments straight through.
    """
    merged: Dict[str, Any] = {}

    path = config_file or find_config_file()
    if path:
        merged.update(load_toml_config(path))

    merged.update(load_config_from_env())

    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    return merged


def load_config(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SamplerConfig:
    """
    Load and validate the sampler configuration.

    Raises:
        ConfigError: if the merged configuration is invalid
    """
    return validate_config(load_config_with_priority(config_file=config_file, overrides=overrides))


def validate_config(values: Dict[str, Any]) -> SamplerConfig:
    """Validate a config mapping, converting pydantic errors to ConfigError."""
    try:
        return SamplerConfig(**values)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"invalid sampler configuration: {errors}") from e
