"""
Configuration levels and value cells.

A ValueCell is the unit of stored configuration: the value plus the level it
came from and whether the key is read-only. Levels are ordered by precedence,
lowest first.
"""

from dataclasses import asdict, dataclass, replace
from enum import IntEnum
from typing import Any

from layeredconf.utils.exceptions import UnknownConfigLevel

PRIMITIVE_TYPES = (str, int, float, bool, type(None))


class ConfigLevel(IntEnum):
    """Configuration levels in precedence order."""
    DEFAULT = 0
    ENVIRONMENT = 1
    BACKEND = 2
    USER = 3
    DYNAMIC = 4

    @property
    def is_restricted(self) -> bool:
        """USER and DYNAMIC writes are user or session controlled."""
        return self in (ConfigLevel.USER, ConfigLevel.DYNAMIC)


@dataclass(frozen=True)
class ValueCell:
    """A stored configuration entry."""
    value: Any
    level: ConfigLevel
    readonly: bool = False

    def with_readonly(self, readonly: bool) -> "ValueCell":
        if self.readonly == readonly:
            return self
        return replace(self, readonly=readonly)

    def is_primitive(self) -> bool:
        return isinstance(self.value, PRIMITIVE_TYPES)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["level"] = self.level.name
        return data


def resolve_level(level: Any) -> ConfigLevel:
    """Resolve a level given as ConfigLevel, int or level name."""
    if isinstance(level, ConfigLevel):
        return level

    try:
        if isinstance(level, str):
            return ConfigLevel[level.upper()]
        if isinstance(level, int) and not isinstance(level, bool):
            return ConfigLevel(level)
    except (KeyError, ValueError):
        pass

    raise UnknownConfigLevel(level=level, details={"level": repr(level)})


def cells_to_values(cells: dict[Any, ValueCell]) -> dict[Any, Any]:
    """Convert a {key: ValueCell} mapping into a plain {key: value} mapping."""
    return {key: cell.value for key, cell in cells.items()}
