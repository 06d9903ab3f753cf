"""
Logging for feed percolator.

Everything goes through loguru. Records from the HTTP stack (httpx, httpcore),
which log through the standard library, are forwarded into the same sinks.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

from feed_percolator.config import LoggingConfig, get_config

# Standard-library loggers forwarded into loguru
LIBRARY_LOGGERS = ("httpx", "httpcore")


class _LoguruBridge(logging.Handler):
    """Forwards standard-library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        _logger.bind(name=record.name).opt(exception=record.exc_info).log(level, record.getMessage())


_bridge = _LoguruBridge()


def _route_library_logs(level: str) -> None:
    for name in LIBRARY_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.handlers = [_bridge]
        library_logger.setLevel(level)
        library_logger.propagate = False


def setup_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> None:
    """Configure loguru sinks for one process.

    Replaces any previously installed sinks. The console sink writes to
    stderr so a feed written to stdout stays clean.

    Args:
        level: Level override, e.g. "DEBUG" for --verbose
        log_file: Log file path; enables file logging when given
        config: Logging configuration, defaults to the global one
    """
    config = config or get_config().logging
    level = level or config.level

    _logger.remove()
    _logger.configure(extra={"name": "feed_percolator"})

    if config.console_enabled:
        _logger.add(
            sys.stderr,
            format=config.format,
            level=level,
            colorize=True,
            diagnose=False,
        )

    if log_file or config.file_enabled:
        log_path = Path(log_file or config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        _logger.add(
            str(log_path),
            format=config.format,
            level=level,
            rotation=config.rotation,
            retention=config.retention,
            encoding="utf-8",
            enqueue=True,
            diagnose=False,
        )

    # HTTP request lines are only interesting when debugging
    _route_library_logs("DEBUG" if level in ("TRACE", "DEBUG") else config.library_level)


def get_logger(name: Optional[str] = None):
    """Get a logger, bound to ``name`` when given.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        Logger instance
    """
    if name:
        return _logger.bind(name=name)
    return _logger


logger = _logger

__all__ = [
    "setup_logger",
    "get_logger",
    "logger",
]
