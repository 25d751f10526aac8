"""
Centralized logging utilities with scoped loggers and decorators.
Provides structured logging with consistent field names across services.
"""

import functools
import logging
import sys
import time
from typing import Any, Callable
from enum import Enum

import structlog

from shared_utils.constants import LogScope


# JSON output; stdlib handles level filtering and routing
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)


class LogLevel(str, Enum):
    """Log level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def configure_logging(level: str = LogLevel.INFO.value) -> None:
    """Route stdlib logging to stdout at ``level``.

    Called once by each process entrypoint (API, worker, scripts).
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )


def get_scoped_logger(scope: str) -> structlog.stdlib.BoundLogger:
    """Get a scoped logger for a specific service/component.

    Args:
        scope: LogScope value (api, semantic_retriever, indexing, ...)

    Returns:
        Structured logger bound to scope.
    """
    logger = structlog.get_logger()
    return logger.bind(scope=scope)


def log_execution(scope: str = LogScope.API):
    """Decorator to automatically log function execution time and results.

    Args:
        scope: Log scope identifier

    Example:
        @log_execution(scope=LogScope.INDEXING)
        def reindex_meeting(self, meeting_id):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            logger = get_scoped_logger(scope)
            start_time = time.time()

            logger.info(
                f"{func.__name__}_start",
                func_name=func.__name__,
                args_count=len(args),
                kwargs_keys=list(kwargs.keys())
            )

            try:
                result = func(*args, **kwargs)
                elapsed = time.time() - start_time

                logger.info(
                    f"{func.__name__}_success",
                    func_name=func.__name__,
                    elapsed_seconds=elapsed,
                    result_type=type(result).__name__
                )
                return result

            except Exception as e:
                elapsed = time.time() - start_time
                logger.error(
                    f"{func.__name__}_failed",
                    func_name=func.__name__,
                    elapsed_seconds=elapsed,
                    error_type=type(e).__name__,
                    error_message=str(e)
                )
                raise

        return wrapper
    return decorator


class ContextualLogger:
    """Helper class for managing contextual logging within a scope."""

    def __init__(self, scope: str, **context: Any):
        self.scope = scope
        self.logger = get_scoped_logger(scope).bind(**context) if context else get_scoped_logger(scope)

    def bind(self, **context: Any) -> "ContextualLogger":
        """Return a child logger carrying extra context on every event."""
        child = ContextualLogger(self.scope)
        child.logger = self.logger.bind(**context)
        return child

    def info(self, event_name: str, **kwargs):
        """Log info message with scope."""
        self.logger.info(event_name, **kwargs)

    def debug(self, event_name: str, **kwargs):
        """Log debug message with scope."""
        self.logger.debug(event_name, **kwargs)

    def warning(self, event_name: str, **kwargs):
        """Log warning message with scope."""
        self.logger.warning(event_name, **kwargs)

    def error(self, event_name: str, **kwargs):
        """Log error message with scope."""
        self.logger.error(event_name, **kwargs)
