"""
LayeredConf - Layered Configuration Manager

Merges configuration values from five precedence levels (default,
environment, backend, user, dynamic) into one effective view, notifies
subscribers of changes and optionally refreshes backend values on an
interval.

License: MIT
Version: 1.0.0
"""

__version__ = "1.0.0"

from layeredconf.core import (
    ConfigLevel,
    Configuration,
    ConfigValueBinding,
    ConfigValuesBinding,
    ValueCell,
)
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
from layeredconf.utils.logging import get_logger, setup_logging

__all__ = [
    "__version__",
    "Configuration",
    "ConfigLevel",
    "ValueCell",
    "ConfigValueBinding",
    "ConfigValuesBinding",
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
    "get_logger",
    "setup_logging",
]
