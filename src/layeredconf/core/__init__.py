"""
LayeredConf Core

Level stores, merge engine, subscriptions, backend refresh and the public
Configuration facade.
"""

from layeredconf.core.backend_refresh import BackendRefreshLoop, RefreshState
from layeredconf.core.binding import ConfigValueBinding, ConfigValuesBinding
from layeredconf.core.configuration import Configuration, InstanceRegistry
from layeredconf.core.levels import ConfigLevel, ValueCell, resolve_level
from layeredconf.core.store import LevelStores
from layeredconf.core.subscriptions import Subscription, SubscriptionRegistry

__all__ = [
    "BackendRefreshLoop",
    "RefreshState",
    "ConfigValueBinding",
    "ConfigValuesBinding",
    "Configuration",
    "InstanceRegistry",
    "ConfigLevel",
    "ValueCell",
    "resolve_level",
    "LevelStores",
    "Subscription",
    "SubscriptionRegistry",
]
