"""Configuration, logging and error types shared by the layer balancer."""

from .config import Config, load_config
from .errors import (
    ConfigurationError,
    GatewayError,
    LayerBalancerError,
    LayerVersionNotFoundError,
    NoPublishedVersionsError,
    RegionQueryError,
    RegionsNotBumpedError,
    TransferError,
    UsageError,
    VersionMismatchError,
)
from .logger import RegionLoggerAdapter, get_logger, setup_logging

__all__ = [
    'Config',
    'load_config',
    'ConfigurationError',
    'GatewayError',
    'LayerBalancerError',
    'LayerVersionNotFoundError',
    'NoPublishedVersionsError',
    'RegionQueryError',
    'RegionsNotBumpedError',
    'TransferError',
    'UsageError',
    'VersionMismatchError',
    'RegionLoggerAdapter',
    'get_logger',
    'setup_logging',
]
