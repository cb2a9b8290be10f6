"""Timing decorator for the distillation entry points."""

import inspect
import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from htmldistill.logger import logger

__all__ = ["timeit"]

P = ParamSpec("P")
R = TypeVar("R")


def timeit(
    name: str | None = None, log_level: int = logging.DEBUG
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log how long the wrapped function takes (sync or async).

    Args:
        name: Label for the log line (default: qualified function name)
        log_level: Logging level to use (default: DEBUG)

    Example:
        >>> @timeit("BM25 filtering")
        ... def apply(self, html):
        ...     ...

    """
    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        label = name or f"{func.__module__}.{func.__qualname__}"

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
                started = time.perf_counter()
                try:
                    return await func(*args, **kwargs)  # type: ignore[no-any-return]
                finally:
                    logger.log(log_level, "%s took %.4f seconds", label,
                               time.perf_counter() - started)
            return async_wrapper  # type: ignore[return-value]

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                logger.log(log_level, "%s took %.4f seconds", label,
                           time.perf_counter() - started)
        return sync_wrapper
    return decorator
