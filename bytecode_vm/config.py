"""
Runtime configuration for the VM.

Values come from, lowest precedence first: built-in defaults, an optional
YAML file, ``BYTECODE_VM_*`` environment variables, then whatever the
caller (usually the CLI) overrides explicitly.
"""

import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping, Optional

import yaml

from .core.errors import ConfigError
from .core.state import DEFAULT_MAX_STACK_DEPTH

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")

ENV_PREFIX = "BYTECODE_VM_"
ENV_KEYS = {
    "MAX_STACK": "max_stack_depth",
    "MAX_STEPS": "max_steps",
    "VERIFY": "verify",
    "LOG_LEVEL": "log_level",
    "LOG_FORMAT": "log_format",
}


@dataclass(frozen=True)
class VMConfig:
    max_stack_depth: int = DEFAULT_MAX_STACK_DEPTH
    max_steps: Optional[int] = None  # None means bounded only by program length
    verify: bool = False  # run static stack analysis before executing
    log_level: str = "INFO"
    log_format: str = "console"

    def __post_init__(self):
        if not _is_int(self.max_stack_depth):
            raise ConfigError(f"max_stack_depth must be an integer, got {self.max_stack_depth!r}")
        if self.max_steps is not None and not _is_int(self.max_steps):
            raise ConfigError(f"max_steps must be an integer or None, got {self.max_steps!r}")
        if not isinstance(self.verify, bool):
            raise ConfigError(f"verify must be a boolean, got {self.verify!r}")
        if self.max_stack_depth < 1:
            raise ConfigError(f"max_stack_depth must be positive, got {self.max_stack_depth}")
        if self.max_steps is not None and self.max_steps < 0:
            raise ConfigError(f"max_steps must not be negative, got {self.max_steps}")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"log_format must be one of {', '.join(LOG_FORMATS)}")

    def with_overrides(self, **overrides: Any) -> "VMConfig":
        """Copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **_coerce(values))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off", ""):
        return False
    raise ConfigError(f"Expected a boolean, got {value!r}")


def _coerce(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert raw file/env values to the field types of VMConfig."""
    known = VMConfig.__dataclass_fields__
    result = {}
    for key, value in values.items():
        if key not in known:
            raise ConfigError(f"Unknown configuration key: {key}")
        try:
            if key == "max_stack_depth":
                result[key] = int(value)
            elif key == "max_steps":
                result[key] = None if value in (None, "", "none", "None") else int(value)
            elif key == "verify":
                result[key] = _parse_bool(value)
            else:
                result[key] = str(value).upper() if key == "log_level" else str(value).lower()
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value for {key}: {value!r}") from e
    return result


def load_config_file(path: str) -> Dict[str, Any]:
    """
    Read a YAML configuration file.

    Args:
        path: Path to the YAML file

    Returns:
        Dict of raw configuration values

    Raises:
        ConfigError: If the file is missing, unparsable or not a mapping
    """
    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    environ = os.environ if environ is None else environ
    values = {}
    for suffix, key in ENV_KEYS.items():
        raw = environ.get(ENV_PREFIX + suffix)
        if raw is not None:
            values[key] = raw
    return values


def load_config(path: Optional[str] = None,
                environ: Optional[Mapping[str, str]] = None,
                **overrides: Any) -> VMConfig:
    """Build a VMConfig from defaults, file, environment and explicit overrides."""
    values: Dict[str, Any] = {}
    if path:
        values.update(load_config_file(path))
    values.update(config_from_env(environ))
    config = VMConfig(**_coerce(values))
    return config.with_overrides(**overrides)
