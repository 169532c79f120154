"""Logging configuration utilities for elasticsim.

elasticsim is silent by default (a NullHandler sits on the package logger).
Call one of the helpers below to see what the simulation is doing.

Every handler created here stamps records with the current simulation time
(``sim_time``, in seconds, or ``-`` outside a run), so log lines can be
lined up against the output series.

Example usage:
    import elasticsim

    elasticsim.enable_console_logging(level="DEBUG")
    elasticsim.enable_file_logging("logs/run.log", max_bytes=10_000_000)
    elasticsim.enable_json_logging()
    elasticsim.configure_from_env()

Environment variables:
    ES_LOGGING: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    ES_LOG_FILE: Path to log file (enables rotating file logging)
    ES_LOG_JSON: Set to "1" for JSON output
"""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from elasticsim.core.clock import Clock

__all__ = [
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [t=%(sim_time)s] %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

LOGGER_NAME = "elasticsim"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_active_clock: Clock | None = None


def bind_clock(clock: Clock | None) -> None:
    """Set (or clear) the clock used to stamp ``sim_time``. Called by Simulation.run()."""
    global _active_clock
    _active_clock = clock


class SimTimeFilter(logging.Filter):
    """Adds ``record.sim_time`` from the clock of the running simulation."""

    def filter(self, record: logging.LogRecord) -> bool:
        clock = _active_clock
        record.sim_time = f"{clock.now.to_seconds():.6f}" if clock is not None else "-"
        return True


class JsonFormatter(logging.Formatter):
    """Formats log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "sim_time": getattr(record, "sim_time", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def _get_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def _get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def _clear_handlers() -> None:
    logger = _get_logger()
    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()


def _install(handler: logging.Handler, level: LogLevel | int, formatter: logging.Formatter) -> None:
    logger = _get_logger()
    logger.setLevel(_get_level(level))
    handler.setLevel(_get_level(level))
    handler.setFormatter(formatter)
    handler.addFilter(SimTimeFilter())
    logger.addHandler(handler)


def _rotating_file(path: str | Path, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)


def enable_console_logging(
    level: LogLevel | int = "INFO",
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> logging.StreamHandler:
    """Enable console (stderr) logging.

    Args:
        level: Log level name or int.
        format: Log message format string; may use ``%(sim_time)s``.
        date_format: Date format string for %(asctime)s.

    Returns:
        The created StreamHandler.
    """
    handler = logging.StreamHandler()
    _install(handler, level, logging.Formatter(format, date_format))
    return handler


def enable_file_logging(
    path: str | Path,
    level: LogLevel | int = "INFO",
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    json_format: bool = False,
) -> RotatingFileHandler:
    """Enable rotating file logging.

    When the file reaches ``max_bytes`` it is rolled over; up to
    ``backup_count`` old files are kept. Parent directories are created.
    """
    handler = _rotating_file(path, max_bytes, backup_count)
    formatter = JsonFormatter() if json_format else logging.Formatter(format, date_format)
    _install(handler, level, formatter)
    return handler


def enable_json_logging(level: LogLevel | int = "INFO") -> logging.StreamHandler:
    """Enable JSON console logging for log aggregation pipelines."""
    handler = logging.StreamHandler()
    _install(handler, level, JsonFormatter())
    return handler


def configure_from_env() -> None:
    """Configure logging from ES_LOGGING, ES_LOG_FILE and ES_LOG_JSON.

    Does nothing when neither a level nor a file is set.
    """
    level = os.environ.get("ES_LOGGING", "").upper()
    log_file = os.environ.get("ES_LOG_FILE", "")
    use_json = os.environ.get("ES_LOG_JSON", "") == "1"

    if not level and not log_file:
        return

    level = level or "INFO"

    if log_file:
        enable_file_logging(log_file, level=level, json_format=use_json)
    elif use_json:
        enable_json_logging(level=level)
    else:
        enable_console_logging(level=level)


def set_level(level: LogLevel | int) -> None:
    """Set the global log level for elasticsim."""
    _get_logger().setLevel(_get_level(level))


def set_module_level(module: str, level: LogLevel | int) -> None:
    """Set the log level of one submodule, e.g. ``set_module_level("components.auto_scaler", "DEBUG")``."""
    logging.getLogger(f"{LOGGER_NAME}.{module}").setLevel(_get_level(level))


def disable_logging() -> None:
    """Remove all handlers and silence the package logger."""
    logger = _get_logger()
    _clear_handlers()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.CRITICAL + 1)
