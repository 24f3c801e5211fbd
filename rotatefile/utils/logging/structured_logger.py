"""
Structured logging with contextual fields and performance timing.

This module provides a thin structured layer over Python's built-in
logging:
- Configurable log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- Contextual key=value fields rendered into each message and attached
  to the record as ``extra``
- Performance timing for critical operations

It is the side channel through which background retention passes report
their results and failures.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, Optional, Union, TypeVar, cast

from ...types.models import LogLevel

# Type variable for generic function decorator
F = TypeVar('F', bound=Callable[..., Any])

_LEVEL_MAP = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL
}


def parse_level(level: Union[LogLevel, str]) -> LogLevel:
    """
    Convert a level name to LogLevel.

    Raises:
        ValueError: If invalid log level is provided
    """
    if isinstance(level, LogLevel):
        return level
    try:
        return LogLevel[level.upper()]
    except KeyError:
        valid_levels = ", ".join([l.name for l in LogLevel])
        raise ValueError(f"Invalid log level: {level}. Valid levels are: {valid_levels}")


def python_level(level: LogLevel) -> int:
    """Convert LogLevel enum to Python's logging level."""
    return _LEVEL_MAP[level]


class StructuredLogger:
    """
    Structured logger built on a standard library logger.

    Handlers are not installed here; where records end up is decided by
    the application (see ``setup_logging``).

    Attributes:
        name (str): Logger name
        _context (Dict): Context data to include with all log entries
    """

    def __init__(
        self,
        name: str,
        level: Optional[Union[LogLevel, str]] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize a new structured logger.

        Args:
            name: Logger name
            level: Log level; leaves the logger's level untouched if None
            context: Context data to include with all log entries
        """
        self.name = name
        self._logger = logging.getLogger(name)
        self._context: Dict[str, Any] = dict(context or {})
        if level is not None:
            self.set_level(level)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def set_level(self, level: Union[LogLevel, str]) -> None:
        """
        Set the log level.

        Raises:
            ValueError: If invalid log level is provided
        """
        self._logger.setLevel(python_level(parse_level(level)))

    def with_context(self, **context: Any) -> 'ContextLogger':
        """Create a new logger with additional context."""
        return ContextLogger(self, context)

    def log(
        self,
        level: LogLevel,
        message: str,
        operation: Optional[str] = None,
        duration_ms: Optional[float] = None,
        error: Optional[Union[str, Exception]] = None,
        **context: Any
    ) -> None:
        """
        Emit ``message`` with context fields, timing and error appended.

        Context is merged over the logger's own context and also attached
        to the record as ``extra["context"]`` for handlers that want the
        fields unrendered.
        """
        py_level = python_level(level)
        if not self._logger.isEnabledFor(py_level):
            return

        combined_context = {**self._context, **context}
        if combined_context:
            context_str = " ".join([f"{k}={v}" for k, v in combined_context.items()])
            message += f" ({context_str})"

        if operation and duration_ms is not None:
            message += f" [operation={operation}, duration={duration_ms:.2f}ms]"

        if error is not None:
            if isinstance(error, Exception):
                message += f" [error={type(error).__name__}: {error}]"
            else:
                message += f" [error={error}]"

        extra = {"context": combined_context}
        if operation:
            extra["operation"] = operation
            extra["duration_ms"] = duration_ms
        self._logger.log(py_level, message, extra=extra)

    def debug(self, message: str, **context: Any) -> None:
        self.log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self.log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self.log(LogLevel.WARNING, message, **context)

    def error(
        self,
        message: str,
        error: Optional[Union[str, Exception]] = None,
        **context: Any
    ) -> None:
        self.log(LogLevel.ERROR, message, error=error, **context)

    def critical(
        self,
        message: str,
        error: Optional[Union[str, Exception]] = None,
        **context: Any
    ) -> None:
        self.log(LogLevel.CRITICAL, message, error=error, **context)

    def performance(self, operation: str, duration_ms: float, **context: Any) -> None:
        """Record how long ``operation`` took, at DEBUG level."""
        self.log(
            LogLevel.DEBUG,
            f"Performance: {operation} completed",
            operation=operation,
            duration_ms=duration_ms,
            **context
        )


class ContextLogger(StructuredLogger):
    """
    Child logger carrying extra context fields.

    Shares the underlying standard library logger of its parent and adds
    its own context to every message.
    """

    def __init__(self, logger: StructuredLogger, context: Dict[str, Any]):
        self.name = logger.name
        self._logger = logger.logger
        self._context = {**logger._context, **context}


def timed(operation_name: str) -> Callable[[F], F]:
    """
    Decorator to time method execution and log performance.

    The duration is logged through ``self.logger`` when it is a
    StructuredLogger.

    Args:
        operation_name: Name of the operation for logging
    """
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = None
            if args and isinstance(getattr(args[0], 'logger', None), StructuredLogger):
                logger = args[0].logger

            start_time = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                duration_ms = (time.perf_counter() - start_time) * 1000
                if logger:
                    logger.performance(operation_name, duration_ms)

        return cast(F, wrapper)
    return decorator
