"""
LayeredConf Configuration Facade

Public entry point wrapping the level stores, the subscription registry and
the backend refresh loop:

1. Default values (construction time, immutable)
2. Environment values
3. Backend values (optionally refreshed periodically)
4. User values
5. Dynamic values (ad-hoc, session scoped)

Higher levels override lower ones key by key.
"""

from collections.abc import Callable, Mapping
from typing import Any

from layeredconf.config.settings import ConfigurationOptions, build_options
from layeredconf.core.backend_refresh import BackendRefreshLoop
from layeredconf.core.levels import ConfigLevel, ValueCell, cells_to_values, resolve_level
from layeredconf.core.store import LevelStores
from layeredconf.core.subscriptions import ChangeCallback, SubscriptionRegistry
from layeredconf.utils.exceptions import (
    InstanceNeedsDefaultConfigs,
    NoBackendUpdateFn,
    NoConfigurationInstance,
)
from layeredconf.utils.logging import get_logger

logger = get_logger(__name__)

OptionsLike = ConfigurationOptions | Mapping[str, Any] | None


class InstanceRegistry:
    """Holds the process-wide Configuration instance."""

    def __init__(self):
        self._instance: "Configuration | None" = None

    def exists(self) -> bool:
        return self._instance is not None

    def get(self) -> "Configuration":
        if self._instance is None:
            raise NoConfigurationInstance()
        return self._instance

    def create(self, instance: "Configuration") -> "Configuration":
        if self._instance is None:
            self._instance = instance
        return self._instance

    def clear(self) -> None:
        self._instance = None


# Global singleton registry
_registry = InstanceRegistry()


def _merge_options(options: OptionsLike, overrides: dict[str, Any]) -> ConfigurationOptions:
    if isinstance(options, ConfigurationOptions):
        return options.model_copy(update=overrides) if overrides else options
    return build_options({**dict(options or {}), **overrides})


def _wants_singleton(options: OptionsLike, overrides: dict[str, Any]) -> bool:
    if "singleton" in overrides:
        return bool(overrides["singleton"])
    if isinstance(options, ConfigurationOptions):
        return options.singleton
    return bool((options or {}).get("singleton", False))


class Configuration:
    """Layered configuration with change notification."""

    def __new__(cls, default_values: Any = None, options: OptionsLike = None, **option_overrides):
        if _wants_singleton(options, option_overrides) and _registry.exists():
            return _registry.get()
        return super().__new__(cls)

    def __init__(self, default_values: Any = None, options: OptionsLike = None, **option_overrides):
        if getattr(self, "_initialized", False):
            # Existing singleton returned by __new__; new defaults are ignored
            return

        self.options = _merge_options(options, option_overrides)
        self._subscriptions = SubscriptionRegistry()
        self._stores = LevelStores(
            default_values,
            read_only_keys=self.options.read_only_keys,
            on_rebuild=self._subscriptions.notify,
        )
        self._stores.rebuild()

        self._backend_refresh: BackendRefreshLoop | None = None
        if self.options.backend_update_fn is not None:
            self._backend_refresh = BackendRefreshLoop(
                fetch_fn=self.options.backend_update_fn,
                snapshot_fn=self.get_values,
                apply_fn=self._apply_backend_result,
                interval_seconds=self.options.backend_update_interval_seconds,
            )

        self._initialized = True

        if self.options.singleton:
            _registry.create(self)

        logger.debug(
            "Configuration created",
            keys=len(self._stores.effective),
            read_only_keys=len(self._stores.read_only_keys),
            singleton=self.options.singleton,
        )

        if self._backend_refresh is not None and self.options.backend_update_start_immediate:
            self._backend_refresh.start_in_background()

    # ------------------------------------------------------------------
    # Getting configuration values
    # ------------------------------------------------------------------

    def get_value(self, key: Any) -> Any:
        """Get a single configuration value, or None for an unknown key."""
        if not self._stores.is_built:
            return None
        cell = self._stores.get_cell(key)
        return cell.value if cell is not None else None

    def get_config(self, key: Any) -> ValueCell | None:
        """Get the effective value cell for a key."""
        return self._stores.get_cell(key)

    def get_configs(self) -> dict[Any, ValueCell]:
        """Shallow copy of the effective mapping."""
        return self._stores.snapshot()

    def get_values(self) -> dict[Any, Any]:
        """Effective mapping as plain {key: value}."""
        return cells_to_values(self._stores.effective)

    def get_configs_for_level(self, level: ConfigLevel | str | int) -> dict[Any, ValueCell]:
        """Shallow copy of a single level store."""
        return self._stores.snapshot(resolve_level(level))

    @property
    def read_only_keys(self) -> frozenset:
        return self._stores.read_only_keys

    def is_read_only(self, key: Any) -> bool:
        return self._stores.is_read_only(key)

    def keys(self) -> list[Any]:
        return list(self._stores.effective)

    def __contains__(self, key: Any) -> bool:
        return self._stores.is_known(key)

    # ------------------------------------------------------------------
    # Setting configuration values
    # ------------------------------------------------------------------

    def set_config(self, key: Any, value: Any) -> bool:
        """Set a dynamic value. Returns False when the key is read-only."""
        return self._stores.set_dynamic(key, value)

    def delete_config(self, key: Any) -> None:
        """Remove a dynamic value so the key falls back to lower levels."""
        self._stores.delete_dynamic(key)

    def set_environment_config(self, values: Mapping[Any, Any], override: bool = False) -> None:
        """Merge environment values, or replace them all with ``override``."""
        self._stores.set_level(ConfigLevel.ENVIRONMENT, values, override_all=override)

    def set_backend_config(self, values: Mapping[Any, Any], override: bool = False) -> None:
        """Merge backend values, or replace them all with ``override``."""
        self._stores.set_level(ConfigLevel.BACKEND, values, override_all=override)

    def set_user_config(self, values: Mapping[Any, Any], override: bool = False) -> None:
        """Merge user values, or replace them all with ``override``.

        Read-only keys are dropped from ``values`` without an error.
        """
        self._stores.set_level(ConfigLevel.USER, values, override_all=override)

    def set_level_config(
        self,
        level: ConfigLevel | str | int,
        values: Mapping[Any, Any],
        override: bool = False,
    ) -> None:
        self._stores.set_level(resolve_level(level), values, override_all=override)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, keys: Any, callback: ChangeCallback) -> Callable[[], None]:
        """Subscribe to changes of ``keys`` (all keys when empty).

        Returns an idempotent unsubscribe function.
        """
        return self._subscriptions.subscribe(keys, callback)

    # ------------------------------------------------------------------
    # Backend auto-update
    # ------------------------------------------------------------------

    @property
    def backend_refresh(self) -> BackendRefreshLoop | None:
        return self._backend_refresh

    @property
    def is_backend_auto_updating(self) -> bool:
        return self._backend_refresh is not None and self._backend_refresh.is_running

    async def start_backend_auto_update(self) -> bool:
        """Fetch backend values now and keep refreshing them on an interval."""
        if self._backend_refresh is None:
            raise NoBackendUpdateFn()
        return await self._backend_refresh.start()

    def stop_backend_auto_update(self) -> None:
        """Stop the backend refresh loop."""
        if self._backend_refresh is not None:
            self._backend_refresh.stop()

    def _apply_backend_result(self, values: dict[Any, Any]) -> None:
        self.set_backend_config(values, override=True)

    # ------------------------------------------------------------------
    # Singleton access
    # ------------------------------------------------------------------

    @classmethod
    def get_instance(cls, default_values: Any = None, options: OptionsLike = None) -> "Configuration":
        """Return the singleton, creating it from ``default_values`` if needed."""
        if not _registry.exists():
            if default_values is None:
                raise InstanceNeedsDefaultConfigs()
            cls(default_values, options, singleton=True)
        return _registry.get()

    @classmethod
    def has_instance(cls) -> bool:
        return _registry.exists()

    @classmethod
    def clear_instance(cls) -> None:
        """Forget the singleton; the next singleton construction builds a new one."""
        _registry.clear()

    @classmethod
    def get_instance_value(cls, key: Any) -> Any:
        """get_value() on the singleton."""
        return _registry.get().get_value(key)

    @classmethod
    def get_instance_configs(cls) -> dict[Any, ValueCell]:
        """get_configs() on the singleton."""
        return _registry.get().get_configs()

    @staticmethod
    def helper_convert_to_value_object(cells: Mapping[Any, ValueCell]) -> dict[Any, Any]:
        """Convert a {key: ValueCell} mapping into {key: value}."""
        return cells_to_values(dict(cells))
