"""
LayeredConf Logging Configuration

Structured logging setup using structlog with JSON output for production
and human-readable output for development.
"""

import logging
import logging.config
import sys
from typing import Any

import structlog


def setup_logging(
    log_level: str = "INFO",
    environment: str = "development",
    enable_json: bool = False,
) -> None:
    """Setup structured logging configuration."""

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production" or enable_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging_from_settings() -> None:
    """Setup logging from the LAYEREDCONF_* environment settings."""
    from layeredconf.config.settings import get_settings

    settings = get_settings()
    setup_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        enable_json=settings.log_json,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance."""
    return structlog.get_logger(name)


class ConfigEventLogger:
    """Specialized logger for configuration events with structured data."""

    def __init__(self):
        self.logger = get_logger("layeredconf.events")

    def log_level_write(
        self,
        level: str,
        keys: list[Any],
        override: bool,
        **kwargs
    ) -> None:
        """Log a write into one level store."""
        self.logger.debug(
            "level_write",
            level=level,
            keys=keys,
            override=override,
            **kwargs
        )

    def log_readonly_rejection(
        self,
        level: str,
        keys: list[Any],
        **kwargs
    ) -> None:
        """Log read-only keys declined at a user or session level."""
        self.logger.info(
            "readonly_rejection",
            level=level,
            keys=keys,
            **kwargs
        )

    def log_readonly_filtered(
        self,
        level: str,
        keys: list[Any],
        **kwargs
    ) -> None:
        """Log read-only keys silently dropped from a level write."""
        self.logger.debug(
            "readonly_filtered",
            level=level,
            keys=keys,
            **kwargs
        )

    def log_unknown_keys(
        self,
        level: str,
        keys: list[Any],
        **kwargs
    ) -> None:
        """Log keys dropped because they are not part of the default key set."""
        self.logger.warning(
            "unknown_keys_dropped",
            level=level,
            keys=keys,
            **kwargs
        )

    def log_backend_refresh(
        self,
        success: bool,
        key_count: int = 0,
        error: str | None = None,
        **kwargs
    ) -> None:
        """Log the outcome of a backend fetch."""
        level = "info" if success else "error"
        getattr(self.logger, level)(
            "backend_refresh",
            success=success,
            key_count=key_count,
            error=error,
            **kwargs
        )
