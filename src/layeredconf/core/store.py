"""
Level stores and merge engine.

Five independent stores (DEFAULT, ENVIRONMENT, BACKEND, USER, DYNAMIC) hold
value cells per key. Every mutation recomputes the effective mapping by
overlaying the stores lowest precedence first and hands the accumulated
change set to the rebuild listener.

The DEFAULT store is filled once from the caller's defaults and covers the
whole key set. Keys outside of it are dropped from level writes so the
effective mapping stays total.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from layeredconf.core.levels import ConfigLevel, ValueCell
from layeredconf.utils.exceptions import (
    ConfigurationError,
    ConfigurationNotBuilt,
    DefaultConfigInvalid,
    UnknownConfigKey,
)
from layeredconf.utils.logging import ConfigEventLogger, get_logger

logger = get_logger(__name__)

RebuildListener = Callable[[dict[Any, ValueCell], frozenset], None]


class LevelStores:
    """Level stores plus the effective mapping derived from them."""

    def __init__(
        self,
        defaults: Mapping[Any, Any],
        read_only_keys: Iterable[Any] = (),
        on_rebuild: RebuildListener | None = None,
    ):
        if not isinstance(defaults, Mapping):
            raise DefaultConfigInvalid(details={"received_type": type(defaults).__name__})

        self._read_only: frozenset = frozenset(read_only_keys)
        self._on_rebuild = on_rebuild
        self._events = ConfigEventLogger()

        self._stores: dict[ConfigLevel, dict[Any, ValueCell]] = {
            level: {} for level in ConfigLevel
        }
        self._stores[ConfigLevel.DEFAULT] = {
            key: self._make_cell(key, value, ConfigLevel.DEFAULT)
            for key, value in defaults.items()
        }

        self._effective: dict[Any, ValueCell] | None = None
        self._pending_changes: set = set()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def is_built(self) -> bool:
        return self._effective is not None

    @property
    def read_only_keys(self) -> frozenset:
        return self._read_only

    def is_known(self, key: Any) -> bool:
        return key in self._stores[ConfigLevel.DEFAULT]

    def is_read_only(self, key: Any) -> bool:
        return key in self._read_only

    @property
    def effective(self) -> dict[Any, ValueCell]:
        """The effective mapping itself; callers must not mutate it."""
        if self._effective is None:
            raise ConfigurationNotBuilt()
        return self._effective

    def get_cell(self, key: Any) -> ValueCell | None:
        return self.effective.get(key)

    def snapshot(self, level: ConfigLevel | None = None) -> dict[Any, ValueCell]:
        """Shallow copy of one level store, or of the effective mapping."""
        if level is None:
            return dict(self.effective)
        return dict(self._stores[level])

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_level(
        self,
        level: ConfigLevel,
        values: Mapping[Any, Any],
        override_all: bool = False,
    ) -> list[Any]:
        """Merge (or with ``override_all`` replace) values into one level.

        Read-only keys are silently dropped from USER and DYNAMIC writes.
        Returns the keys that were written.
        """
        self._ensure_built()

        if level is ConfigLevel.DEFAULT:
            raise ConfigurationError(
                "The default level is immutable after construction.",
                details={"level": level.name},
            )
        if not isinstance(values, Mapping):
            raise ConfigurationError(
                f"Values for level {level.name} must be a mapping.",
                details={"received_type": type(values).__name__},
            )

        accepted = self._filter_writes(level, values)
        cells = {key: self._make_cell(key, value, level) for key, value in accepted.items()}

        store = self._stores[level]
        if override_all:
            removed = [key for key in store if key not in cells]
            self._pending_changes.update(removed)
            self._stores[level] = cells
        else:
            store.update(cells)

        self._pending_changes.update(cells)
        self._events.log_level_write(level.name, list(cells), override_all)

        self.rebuild()
        return list(cells)

    def set_dynamic(self, key: Any, value: Any) -> bool:
        """Write one key at DYNAMIC; returns False for read-only keys."""
        self._ensure_built()

        if not self.is_known(key):
            raise UnknownConfigKey(config_key=key, details={"key": repr(key)})
        if self.is_read_only(key):
            self._events.log_readonly_rejection(ConfigLevel.DYNAMIC.name, [key])
            return False

        self._stores[ConfigLevel.DYNAMIC][key] = self._make_cell(key, value, ConfigLevel.DYNAMIC)
        self._pending_changes.add(key)
        self.rebuild()
        return True

    def delete_dynamic(self, key: Any) -> None:
        """Remove one key from DYNAMIC; deleting an absent key is a no-op."""
        self._ensure_built()

        self._stores[ConfigLevel.DYNAMIC].pop(key, None)
        if self.is_known(key):
            self._pending_changes.add(key)
        self.rebuild()

    def rebuild(self) -> None:
        """Recompute the effective mapping and notify the rebuild listener."""
        effective: dict[Any, ValueCell] = {}
        for level in ConfigLevel:
            effective.update(self._stores[level])

        for key in self._read_only:
            cell = effective.get(key)
            if cell is not None:
                effective[key] = cell.with_readonly(True)

        self._effective = effective

        changed = frozenset(self._pending_changes)
        self._pending_changes.clear()

        if self._on_rebuild is not None:
            self._on_rebuild(effective, changed)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _ensure_built(self) -> None:
        if self._effective is None:
            raise ConfigurationNotBuilt()

    def _make_cell(self, key: Any, value: Any, level: ConfigLevel) -> ValueCell:
        return ValueCell(value=value, level=level, readonly=key in self._read_only)

    def _filter_writes(self, level: ConfigLevel, values: Mapping[Any, Any]) -> dict[Any, Any]:
        unknown = [key for key in values if not self.is_known(key)]
        if unknown:
            self._events.log_unknown_keys(level.name, unknown)

        declined: list[Any] = []
        accepted: dict[Any, Any] = {}
        for key, value in values.items():
            if not self.is_known(key):
                continue
            if level.is_restricted and self.is_read_only(key):
                declined.append(key)
                continue
            accepted[key] = value

        if declined:
            self._events.log_readonly_filtered(level.name, declined)

        return accepted
