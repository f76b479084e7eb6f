"""
Logging setup for the invoice scan pipeline.

Every module logs through get_logger(__name__); all loggers hang under the
"invoice_scan" namespace, so one call to setup_logger (or
setup_logger_from_config at startup) configures the whole pipeline without
touching the host application's root logger.

Usage:
    from invoice_scan.utils.logger import get_logger

    logger = get_logger(__name__)
    logger.warning("Vendor table parser failed, falling back to generic")
"""

import copy
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import colorama
from colorama import Fore, Style

from .exceptions import ConfigurationError

colorama.init()

ROOT_LOGGER_NAME = "invoice_scan"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class ColoredFormatter(logging.Formatter):
    """Console formatter that colours the level name only."""

    LEVEL_COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color:
            # Other handlers share the record
            record = copy.copy(record)
            record.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        return super().format(record)


def parse_level(level) -> int:
    """
    Turn "debug", "INFO", 20, ... into a logging level.

    Raises:
        ConfigurationError: If the level is not a known logging level.
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ConfigurationError("logging.level", f"unknown level: {level!r}")
    return value


def setup_logger(
    level="INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = 5,
    colorize: bool = True
) -> logging.Logger:
    """
    Configure the pipeline's namespace logger.

    Replaces any handlers installed by an earlier call. Console output goes
    to stderr so JSON written to stdout stays clean.

    Args:
        level: Level name or number.
        log_format: Record format (default: time | level | logger | message).
        date_format: Timestamp format.
        log_file: Optional rotating log file; parent directories are created.
        max_bytes: Rotation size of the log file.
        backup_count: Rotated files kept.
        colorize: Colour level names on the console.

    Returns:
        The "invoice_scan" logger.
    """
    numeric_level = parse_level(level)
    log_format = log_format or DEFAULT_FORMAT
    date_format = date_format or DEFAULT_DATE_FORMAT

    pipeline_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(pipeline_logger.handlers):
        pipeline_logger.removeHandler(handler)
        handler.close()
    pipeline_logger.setLevel(numeric_level)
    pipeline_logger.propagate = False

    formatter_class = ColoredFormatter if colorize else logging.Formatter
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter_class(log_format, datefmt=date_format))
    pipeline_logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'
        )
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        pipeline_logger.addHandler(file_handler)

    return pipeline_logger


def set_debug() -> None:
    """Switch the pipeline logger to DEBUG (--debug on the command line)."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.DEBUG)


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a module, placed under the pipeline namespace.

    Example:
        >>> get_logger("main").name
        'invoice_scan.main'
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logger_from_config() -> logging.Logger:
    """Configure logging from the "logging" section of the settings file."""
    from config import get_config

    log_file = None
    if get_config("logging.file.enabled", False):
        log_file = get_config("logging.file.path")

    return setup_logger(
        level=get_config("logging.level", "INFO"),
        log_format=get_config("logging.format"),
        date_format=get_config("logging.date_format"),
        log_file=log_file,
        max_bytes=get_config("logging.file.max_bytes", DEFAULT_MAX_BYTES),
        backup_count=get_config("logging.file.backup_count", 5),
        colorize=get_config("logging.console.colorize", True)
    )
