"""
LayeredConf Settings

Two pydantic models live here:

1. ConfigurationOptions - validated options of a single Configuration instance
2. LayeredConfSettings - library-wide ambient settings read from LAYEREDCONF_*
   environment variables (logging level, environment name, ...)
"""

from collections.abc import Callable
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from layeredconf.config.constants import DEFAULT_BACKEND_UPDATE_INTERVAL_MS


class ConfigurationOptions(BaseModel):
    """Options accepted by the Configuration facade."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    # Return the process-wide instance instead of building a new one
    singleton: bool = False

    # Keys that USER and DYNAMIC writes may never change
    read_only_keys: list[Any] = Field(default_factory=list)

    # Receives a {key: value} snapshot, returns (awaitable) partial {key: value}
    backend_update_fn: Callable[[dict[Any, Any]], Any] | None = None

    backend_update_interval_ms: int = Field(default=DEFAULT_BACKEND_UPDATE_INTERVAL_MS, gt=0)
    backend_update_start_immediate: bool = False

    @field_validator("read_only_keys", mode="before")
    @classmethod
    def _coerce_read_only_keys(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (set, frozenset, tuple)):
            return list(value)
        return value

    @property
    def backend_update_interval_seconds(self) -> float:
        return self.backend_update_interval_ms / 1000.0


class LayeredConfSettings(BaseSettings):
    """Library-level settings using pydantic-settings for environment loading."""

    model_config = SettingsConfigDict(
        env_prefix="LAYEREDCONF_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = "development"
    log_level: str = "INFO"
    log_json: bool = False
    default_backend_update_interval_ms: int = Field(
        default=DEFAULT_BACKEND_UPDATE_INTERVAL_MS, gt=0
    )


@lru_cache
def get_settings() -> LayeredConfSettings:
    """Get the cached library settings."""
    return LayeredConfSettings()


def build_options(options: ConfigurationOptions | dict[str, Any] | None = None) -> ConfigurationOptions:
    """Normalize user supplied options into a ConfigurationOptions model.

    Missing ``backend_update_interval_ms`` falls back to the
    LAYEREDCONF_DEFAULT_BACKEND_UPDATE_INTERVAL_MS setting.
    """
    if isinstance(options, ConfigurationOptions):
        return options

    data = dict(options or {})
    data.setdefault(
        "backend_update_interval_ms",
        get_settings().default_backend_update_interval_ms,
    )
    return ConfigurationOptions(**data)
