"""
LayeredConf Custom Exceptions

Defines the exception classes raised by the configuration manager. Every
concrete error carries a stable error code and a default message looked up
in the ERROR_MESSAGES table.
"""

from typing import Any

from layeredconf.config.constants import ERROR_MESSAGES


class LayeredConfError(Exception):
    """Base exception class for LayeredConf-specific errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigurationError(LayeredConfError):
    """Raised when there's an error in configuration management."""

    code: str | None = None

    def __init__(
        self,
        message: str | None = None,
        config_key: Any | None = None,
        **kwargs
    ):
        kwargs.setdefault("error_code", self.code)
        if message is None:
            message = ERROR_MESSAGES.get(self.code or "", "Configuration error")
        super().__init__(message, **kwargs)
        self.config_key = config_key


class DefaultConfigInvalid(ConfigurationError):
    """Raised when the default values are not a mapping."""
    code = "DEFAULTCONFIG_MUST_BE_OBJECT"


class ConfigurationNotBuilt(ConfigurationError):
    """Raised when the effective mapping is accessed before the first build."""
    code = "CONFIGURATIONS_NOT_BUILT_YET"


class UnknownConfigKey(ConfigurationError):
    """Raised for a key that is not part of the default key set."""
    code = "UNKNOWN_CONFIG_KEY"


class UnknownConfigLevel(ConfigurationError):
    """Raised when an invalid level is passed to a level-scoped accessor."""

    code = "UNKNOWN_CONFIG_LEVEL"

    def __init__(self, message: str | None = None, level: Any | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.level = level


class NoConfigurationInstance(ConfigurationError):
    """Raised by the class-level accessors when no singleton exists."""
    code = "NO_CONFIGURATION_INSTANCE"


class InstanceNeedsDefaultConfigs(ConfigurationError):
    """Raised when the first singleton is requested without defaults."""
    code = "INSTANCE_NEEDS_DEFAULTCONFIGS"


class NoBackendUpdateFn(ConfigurationError):
    """Raised when the refresh loop is started without a fetch function."""
    code = "NO_BACKEND_UPDATE_FN"


class BackendUpdateFailed(ConfigurationError):
    """Raised when the backend fetch function fails.

    The original exception is kept as ``cause`` and chained as ``__cause__``.
    """

    code = "BACKEND_UPDATE_FAILED"

    def __init__(self, message: str | None = None, cause: BaseException | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.cause = cause
        if cause is not None:
            self.details.setdefault("cause", repr(cause))


class InvalidConfigType(ConfigurationError):
    """Raised when a stored value is not a primitive where one is required."""

    code = "INVALID_CONFIG_TYPE"

    def __init__(self, message: str | None = None, value_type: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.value_type = value_type
