"""
LayeredConf Utility Decorators

Latency measurement for configuration operations.
"""

import inspect
import time
from collections.abc import Callable
from functools import wraps
from typing import Any

from layeredconf.utils.logging import get_logger

logger = get_logger(__name__)


def measure_latency(operation_name: str | None = None) -> Callable:
    """Decorator to measure and log function execution latency."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            op_name = operation_name or func.__name__
            start_time = time.perf_counter()
            success = False

            try:
                result = await func(*args, **kwargs)
                success = True
                return result
            finally:
                latency_ms = (time.perf_counter() - start_time) * 1000

                logger.debug(
                    f"latency_measurement: {op_name} took {latency_ms:.2f}ms, success={success}"
                )

        @wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            op_name = operation_name or func.__name__
            start_time = time.perf_counter()
            success = False

            try:
                result = func(*args, **kwargs)
                success = True
                return result
            finally:
                latency_ms = (time.perf_counter() - start_time) * 1000

                logger.debug(
                    f"latency_measurement: {op_name} took {latency_ms:.2f}ms, success={success}"
                )

        # Return appropriate wrapper based on function type
        if inspect.iscoroutinefunction(func):
            return async_wrapper
        else:
            return sync_wrapper

    return decorator
