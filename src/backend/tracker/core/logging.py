"""
Structured logging configuration using structlog.

Provides consistent JSON logging for production and human-readable
console output for development. Rendered records go through the standard
library so the same line can reach stdout and a rotating server log file.
"""

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import Any

import structlog
from structlog.types import Processor

from tracker.core.config import Settings
from tracker.core.exceptions import LoggingInitException

MAIN_LOGGER_NAME = "main"

_installed_handlers: list[logging.Handler] = []


def _server_log_handler(settings: Settings, server_name: str) -> logging.Handler:
    log_settings = settings.server.log
    filename = os.path.join(log_settings.path, f"{server_name}-{MAIN_LOGGER_NAME}.log")
    try:
        os.makedirs(log_settings.path, exist_ok=True)
        return TimedRotatingFileHandler(
            filename,
            when="M",
            interval=log_settings.rotation_min,
            backupCount=log_settings.max_backups,
            encoding="utf-8",
        )
    except OSError as e:
        raise LoggingInitException(
            f"Unable to open server log file: {e}", path=filename
        ) from e


def setup_logging(settings: Settings, server_name: str) -> None:
    """
    Configure structured logging for the process.

    Uses JSON format in production for log aggregation compatibility,
    and colored console output in development for readability. Every
    record is tagged with ``server`` so lines from several hosts can be
    told apart.

    Raises:
        LoggingInitException: the server log file could not be opened
    """
    level = getattr(logging, settings.log_level)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.server.log.path:
        handlers.append(_server_log_handler(settings, server_name))

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=bool(sys.stdout.isatty())),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(server=server_name)

    # Replace only the handlers installed by a previous call
    root = logging.getLogger()
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()
    formatter = logging.Formatter("%(message)s")
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
        _installed_handlers.append(handler)
    root.setLevel(level)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)
        **initial_context: Initial context values to bind to the logger

    Returns:
        BoundLogger: Configured structured logger

    Example:
        >>> logger = get_logger(__name__, token_count=2)
        >>> logger.info("Resources provisioned", directory="/var/log/events")
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


class LoggerMixin:
    """
    Mixin class that provides a logger property to any class.

    Example:
        >>> class EventWriter(LoggerMixin):
        ...     def flush(self):
        ...         self.logger.debug("Flushing")
    """

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        """Get logger bound with class name."""
        return get_logger(self.__class__.__name__)
