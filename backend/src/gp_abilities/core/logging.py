"""Logging configuration for the GeneratePress abilities service.

Console output uses a colored, aligned formatter in development and a JSON
formatter when ``log_format`` is ``json``. When ``log_dir`` is configured a
plain file handler writes alongside the console, one file per host.
"""

import json
import logging
import os
import socket
import sys
import traceback
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, ClassVar, TextIO

from .config import get_settings_instance

# Internal guard to prevent double configuration when setup_logging() is called
# both at import-time and again from the CLI entry point
_LOGGING_CONFIGURED = False

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
    }
)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for human-readable logs."""

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors and trailing extra fields."""
        level_color = self.COLORS.get(record.levelname, "") if self.use_colors else ""
        reset_color = self.COLORS["RESET"] if self.use_colors else ""

        timestamp = datetime.fromtimestamp(record.created, UTC).strftime("%Y-%m-%d %H:%M:%S")

        logger_name = record.name
        if len(logger_name) > 25:
            logger_name = logger_name[:22] + "..."

        extra_fields = []
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or value is None:
                continue
            # Only include short scalar extras
            if isinstance(value, (str, int, float, bool)) and len(str(value)) < 100:
                extra_fields.append(f"{key}={value}")

        log_line = (
            f"{timestamp} - {level_color}{record.levelname}{reset_color} - {logger_name:25} - {record.getMessage()}"
        )
        if extra_fields:
            log_line += f" | {' '.join(extra_fields)}"

        if record.exc_info:
            exc_info = traceback.format_exception(*record.exc_info)
            log_line += f"\n{level_color}Exception:{reset_color}\n" + "".join(exc_info)

        return log_line


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            exc_type = record.exc_info[0]
            log_data["exception"] = {
                "type": exc_type.__name__ if exc_type is not None else "Unknown",
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(stream: TextIO | None = None) -> None:
    """Configure root, package and uvicorn loggers once per process.

    Console output goes to ``stream`` (stdout by default).
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if _LOGGING_CONFIGURED:
        return

    settings = get_settings_instance()

    stream = stream or sys.stdout
    use_colors = settings.environment == "development" and stream.isatty()
    formatter = JSONFormatter() if settings.log_format == "json" else ColoredFormatter(use_colors=use_colors)

    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [console_handler]

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        os.makedirs(log_dir, exist_ok=True)
        # Hostname in the filename keeps replicas from clobbering each other
        log_file_path = log_dir / f"gp_abilities_{socket.gethostname()}.log"
        file_handler = logging.FileHandler(log_file_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    level = getattr(logging, settings.log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in handlers:
        root_logger.addHandler(handler)

    # Uvicorn logs - use config level but cap at WARNING to reduce noise
    uvicorn_level = min(level, logging.WARNING)
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uvicorn_log = logging.getLogger(name)
        uvicorn_log.setLevel(uvicorn_level)
        uvicorn_log.handlers.clear()
        for handler in handlers:
            uvicorn_log.addHandler(handler)
        uvicorn_log.propagate = False

    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger = logging.getLogger("gp_abilities")
    logger.setLevel(level)
    logger.info(
        "Logging configured",
        extra={
            "log_level": settings.log_level,
            "log_format": settings.log_format,
            "environment": settings.environment,
            "use_colors": use_colors,
        },
    )
    _LOGGING_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    if name == "gp_abilities" or name.startswith("gp_abilities."):
        return logging.getLogger(name)
    return logging.getLogger(f"gp_abilities.{name}")
