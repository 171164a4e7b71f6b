"""
LayeredConf Utility Modules

Common utilities for logging, exceptions and decorators.
"""

from layeredconf.utils.decorators import measure_latency
from layeredconf.utils.exceptions import (
    BackendUpdateFailed,
    ConfigurationError,
    ConfigurationNotBuilt,
    DefaultConfigInvalid,
    InstanceNeedsDefaultConfigs,
    InvalidConfigType,
    LayeredConfError,
    NoBackendUpdateFn,
    NoConfigurationInstance,
    UnknownConfigKey,
    UnknownConfigLevel,
)
from layeredconf.utils.logging import ConfigEventLogger, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "ConfigEventLogger",
    "LayeredConfError",
    "ConfigurationError",
    "DefaultConfigInvalid",
    "ConfigurationNotBuilt",
    "UnknownConfigKey",
    "UnknownConfigLevel",
    "NoConfigurationInstance",
    "InstanceNeedsDefaultConfigs",
    "NoBackendUpdateFn",
    "BackendUpdateFailed",
    "InvalidConfigType",
    "measure_latency",
]
