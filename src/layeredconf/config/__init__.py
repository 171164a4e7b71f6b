"""
LayeredConf Configuration Module

Options for Configuration instances and the library's own ambient settings.
"""

from layeredconf.config.constants import (
    DEFAULT_BACKEND_UPDATE_INTERVAL_MS,
    ERROR_MESSAGES,
)
from layeredconf.config.settings import (
    ConfigurationOptions,
    LayeredConfSettings,
    build_options,
    get_settings,
)

__all__ = [
    "ConfigurationOptions",
    "LayeredConfSettings",
    "build_options",
    "get_settings",
    "DEFAULT_BACKEND_UPDATE_INTERVAL_MS",
    "ERROR_MESSAGES",
]
