"""
Logging setup for docpager.

Library modules only call logging.getLogger(__name__); applications call
configure_logging once to attach a rich console handler and, optionally, a
rotating log file.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level(level: str) -> int:
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}")
    return getattr(logging, level.upper())


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance for module.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if not name or not isinstance(name, str):
        raise ValueError("Logger name must be a non-empty string")
    return logging.getLogger(name)


def create_rich_handler(level: str = "INFO", console: Optional[Console] = None) -> RichHandler:
    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=True,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setLevel(_level(level))
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    return handler


def add_file_handler(
    logger: logging.Logger,
    file_path: str,
    level: str = "INFO",
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> RotatingFileHandler:
    """
    Add a rotating file handler to logger.

    Args:
        logger: Logger instance
        file_path: Log file path
        level: Log level for this handler
        max_file_size: Maximum log file size in bytes
        backup_count: Number of backup files to keep
    """
    if not file_path or not isinstance(file_path, str):
        raise ValueError("File path must be a non-empty string")

    log_dir = os.path.dirname(file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    file_handler = RotatingFileHandler(file_path, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8")
    file_handler.setLevel(_level(level))
    file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(file_handler)
    return file_handler


def configure_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rich_output: bool = True,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a rotating log file
        rich_output: Use rich for console output; plain StreamHandler otherwise
        console: rich Console to write to (defaults to stderr)

    Returns:
        The root logger
    """
    numeric_level = _level(level)
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if rich_output:
        root_logger.addHandler(create_rich_handler(level, console=console))
    else:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(numeric_level)
        stream_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(stream_handler)

    if log_file:
        add_file_handler(root_logger, log_file, level)
    return root_logger


def get_logger_info(logger: logging.Logger) -> Dict[str, Any]:
    return {
        "name": logger.name,
        "level": logging.getLevelName(logger.getEffectiveLevel()),
        "handlers": [type(handler).__name__ for handler in logger.handlers],
        "propagate": logger.propagate,
    }
