"""
Invoice Manager logging.

All project loggers hang under the "invoice_manager" namespace. Console
output goes to stderr, colored by level, so that the command-line report on
stdout stays clean JSON. An optional rotating file keeps a plain-text copy.

Usage:
    from invoice_manager.utils.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Rasterizing march.pdf")

main.py calls setup_logger_from_config() once before the first cycle.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import colorama
from colorama import Fore, Style

colorama.init()

ROOT_LOGGER_NAME = "invoice_manager"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class ColoredFormatter(logging.Formatter):
    """Wraps each console line in the color of its level."""

    LEVEL_COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        if not color:
            return line
        return f"{color}{line}{Style.RESET_ALL}"


def setup_logger(
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = 5,
    colorize: bool = True,
    stream=None
) -> logging.Logger:
    """
    (Re)configure the "invoice_manager" logger.

    Handlers installed by an earlier call are replaced, so calling this
    twice never doubles the output.

    Args:
        level: Level name applied to the logger and its handlers.
        log_format: Record format; DEFAULT_FORMAT when None.
        date_format: Timestamp format; DEFAULT_DATE_FORMAT when None.
        log_file: Rotating log file, or None for console only.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files kept next to the log file.
        colorize: Color console lines by level.
        stream: Console stream; sys.stderr when None.

    Returns:
        The "invoice_manager" logger.
    """
    log_format = log_format or DEFAULT_FORMAT
    date_format = date_format or DEFAULT_DATE_FORMAT
    numeric_level = getattr(logging, level.upper())

    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    app_logger.setLevel(numeric_level)
    app_logger.handlers.clear()
    app_logger.propagate = False

    formatter_class = ColoredFormatter if colorize else logging.Formatter
    console = logging.StreamHandler(stream or sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(formatter_class(log_format, datefmt=date_format))
    app_logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'
        )
        rotating.setLevel(numeric_level)
        rotating.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        app_logger.addHandler(rotating)

    app_logger.debug(f"Logging at {level.upper()}" + (f", file {path}" if log_file else ""))
    return app_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, placed under the "invoice_manager" namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logger_from_config() -> logging.Logger:
    """Configure logging from the "logging" section of settings.yaml."""
    from config import get_config

    log_file = get_config("logging.file.path") if get_config("logging.file.enabled", False) else None

    return setup_logger(
        level=get_config("logging.level", "INFO"),
        log_format=get_config("logging.format"),
        date_format=get_config("logging.date_format"),
        log_file=log_file,
        max_bytes=get_config("logging.file.max_bytes", DEFAULT_MAX_BYTES),
        backup_count=get_config("logging.file.backup_count", 5),
        colorize=get_config("logging.console.colorize", True)
    )
