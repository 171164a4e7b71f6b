"""
Value bindings.

Framework-neutral handles that keep a local copy of one or more configuration
values up to date through a subscription. UI adapters wrap these and re-render
when ``on_change`` fires.
"""

from collections.abc import Callable, Iterable
from typing import Any

from layeredconf.core.configuration import Configuration
from layeredconf.core.levels import ValueCell
from layeredconf.utils.exceptions import InvalidConfigType, UnknownConfigKey


def _primitive(key: Any, cell: ValueCell | None) -> Any:
    if cell is None:
        raise UnknownConfigKey(config_key=key, details={"key": repr(key)})
    if not cell.is_primitive():
        raise InvalidConfigType(config_key=key, value_type=type(cell.value).__name__)
    return cell.value


class ConfigValueBinding:
    """Tracks a single configuration value."""

    def __init__(
        self,
        config: Configuration,
        key: Any,
        on_change: Callable[[Any], None] | None = None,
    ):
        self.config = config
        self.key = key
        self.on_change = on_change
        self._value = _primitive(key, config.get_config(key))
        self._unsubscribe: Callable[[], None] | None = config.subscribe([key], self._handle_change)

    @property
    def value(self) -> Any:
        return self._value

    def set(self, value: Any) -> bool:
        """Set the value at the dynamic level."""
        return self.config.set_config(self.key, value)

    def clear(self) -> None:
        """Drop the dynamic value."""
        self.config.delete_config(self.key)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def closed(self) -> bool:
        return self._unsubscribe is None

    def _handle_change(self, changed: dict[Any, ValueCell]) -> None:
        cell = changed.get(self.key)
        if cell is None:
            return
        self._value = _primitive(self.key, cell)
        if self.on_change is not None:
            self.on_change(self._value)

    def __enter__(self) -> "ConfigValueBinding":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ConfigValuesBinding:
    """Tracks several configuration values, or all of them."""

    def __init__(
        self,
        config: Configuration,
        keys: Iterable[Any] | None = None,
        on_change: Callable[[dict[Any, Any]], None] | None = None,
    ):
        self.config = config
        self.keys = list(keys) if keys else []
        self.on_change = on_change

        cells = config.get_configs()
        if self.keys:
            missing = [key for key in self.keys if key not in cells]
            if missing:
                raise UnknownConfigKey(config_key=missing[0], details={"keys": [repr(k) for k in missing]})
            cells = {key: cells[key] for key in self.keys}

        self._values = {key: _primitive(key, cell) for key, cell in cells.items()}
        self._unsubscribe: Callable[[], None] | None = config.subscribe(self.keys, self._handle_change)

    @property
    def values(self) -> dict[Any, Any]:
        return dict(self._values)

    def get(self, key: Any) -> Any:
        return self._values.get(key)

    def set(self, key: Any, value: Any) -> bool:
        return self.config.set_config(key, value)

    def clear(self, key: Any) -> None:
        self.config.delete_config(key)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def closed(self) -> bool:
        return self._unsubscribe is None

    def _handle_change(self, changed: dict[Any, ValueCell]) -> None:
        updates = {key: _primitive(key, cell) for key, cell in changed.items()}
        if not updates:
            return
        self._values.update(updates)
        if self.on_change is not None:
            self.on_change(dict(self._values))

    def __enter__(self) -> "ConfigValuesBinding":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
