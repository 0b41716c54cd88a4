"""Configuration management for the layer balancer."""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from .errors import ConfigurationError

LOG_FORMATS = ('simple', 'structured')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

TRUE_VALUES = ('1', 'true', 'yes', 'on')
FALSE_VALUES = ('0', 'false', 'no', 'off', '')


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got '{value}'")


def _to_int(name: str, value: Any) -> int:
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ConfigurationError(f"{name} must be an integer, got '{value}'")
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got '{value}'") from e


def _to_float(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ConfigurationError(f"{name} must be a number, got '{value}'")
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got '{value}'") from e


def _to_str(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{name} must be a string, got '{value}'")
    return value


def _to_optional_str(name: str, value: Any) -> Optional[str]:
    if value is None:
        return None
    return _to_str(name, value) or None


def _env_bool(var_name: str, default: str) -> bool:
    return _to_bool(var_name, os.getenv(var_name, default))


def _env_int(var_name: str, default: str) -> int:
    return _to_int(var_name, os.getenv(var_name, default))


def _env_float(var_name: str, default: str) -> float:
    return _to_float(var_name, os.getenv(var_name, default))

@dataclass
class Config:
    """Runtime settings, read from the environment when instantiated."""

    # Logging
    LOG_LEVEL: str = field(default_factory=lambda: os.getenv('LB_LOG_LEVEL', 'WARNING'))
    LOG_FORMAT: str = field(default_factory=lambda: os.getenv('LB_LOG_FORMAT', 'simple'))

    # AWS credentials profile, None uses the default credential chain
    AWS_PROFILE: Optional[str] = field(default_factory=lambda: os.getenv('AWS_PROFILE') or None)

    # Retries of transient network errors; 1 disables retrying
    RETRY_ATTEMPTS: int = field(default_factory=lambda: _env_int('LB_RETRY_ATTEMPTS', '1'))
    RETRY_MIN_WAIT: float = field(default_factory=lambda: _env_float('LB_RETRY_MIN_WAIT', '1'))
    RETRY_MAX_WAIT: float = field(default_factory=lambda: _env_float('LB_RETRY_MAX_WAIT', '10'))

    # Payload download
    DOWNLOAD_TIMEOUT_SECONDS: float = field(
        default_factory=lambda: _env_float('LB_DOWNLOAD_TIMEOUT_SECONDS', '300')
    )
    DOWNLOAD_CHUNK_SIZE: int = field(default_factory=lambda: _env_int('LB_DOWNLOAD_CHUNK_SIZE', '65536'))

    # Fail a region when the published version number differs from the source
    STRICT_NUMBERING: bool = field(default_factory=lambda: _env_bool('LB_STRICT_NUMBERING', 'false'))

    # Prometheus textfile collector output, None disables metrics export
    METRICS_TEXTFILE: Optional[str] = field(default_factory=lambda: os.getenv('LB_METRICS_TEXTFILE') or None)

    def validate(self) -> bool:
        """Validate configuration."""
        if self.LOG_LEVEL.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level '{self.LOG_LEVEL}'")
        if self.LOG_FORMAT not in LOG_FORMATS:
            raise ConfigurationError(
                f"Unknown log format '{self.LOG_FORMAT}', expected one of {', '.join(LOG_FORMATS)}"
            )

        for name in ('RETRY_ATTEMPTS', 'DOWNLOAD_TIMEOUT_SECONDS', 'DOWNLOAD_CHUNK_SIZE'):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"Configuration field '{name}' must be positive")

        if self.RETRY_MIN_WAIT < 0 or self.RETRY_MAX_WAIT < self.RETRY_MIN_WAIT:
            raise ConfigurationError("Retry waits must satisfy 0 <= RETRY_MIN_WAIT <= RETRY_MAX_WAIT")

        return True


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from the environment and an optional YAML file.

    Keys in the file are the lowercase field names (``retry_attempts: 3``)
    and take precedence over the environment.

    Args:
        config_path: Path to a YAML file, or None for environment only

    Returns:
        Validated configuration
    """
    config = Config()

    if config_path:
        path = Path(config_path)
        try:
            with path.open('r') as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config file {path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        config = replace(config, **_map_keys(file_config))

    config.validate()
    return config


_CONVERTERS: Dict[Any, Callable[[str, Any], Any]] = {
    bool: _to_bool,
    int: _to_int,
    float: _to_float,
    str: _to_str,
    Optional[str]: _to_optional_str,
}


def _map_keys(file_config: Dict[str, Any]) -> Dict[str, Any]:
    """Map lowercase file keys onto fields, converting values to the field type"""
    types = {f.name: f.type for f in fields(Config)}
    overrides = {}
    for key, value in file_config.items():
        name = str(key).upper()
        if name not in types:
            raise ConfigurationError(f"Unknown configuration key '{key}'")
        overrides[name] = _CONVERTERS[types[name]](str(key), value)
    return overrides
