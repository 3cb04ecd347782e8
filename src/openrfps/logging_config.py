"""Logging configuration for openrfps."""

import logging
import sys
from pathlib import Path
from typing import Optional


DEFAULT_LOG_DIR = Path("logs")
DEFAULT_LOG_FILE = "openrfps.log"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_file: Optional[Path] = None,
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    console: bool = True,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """Configure logging for the openrfps package.

    Console output goes to stderr so that commands printing JSON on
    stdout stay machine readable.

    Args:
        log_file: Path to log file. When neither this nor ``log_dir`` is
            given, no file handler is installed.
        log_dir: Directory for log files (default file name: openrfps.log)
        level: Logging level (default: INFO)
        console: Whether to also log to stderr (default: True)
        format_string: Custom log format string

    Returns:
        The configured ``openrfps`` logger
    """
    fmt = format_string or DEFAULT_FORMAT
    formatter = logging.Formatter(fmt, datefmt=DEFAULT_DATE_FORMAT)

    logger = logging.getLogger("openrfps")
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    if log_file is not None or log_dir is not None:
        if log_dir is None:
            log_dir = DEFAULT_LOG_DIR
        if log_file is None:
            log_file = log_dir / DEFAULT_LOG_FILE
        elif not log_file.is_absolute():
            log_file = log_dir / log_file

        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.propagate = False

    if log_file is not None:
        logger.debug(f"Logging initialized: {log_file}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module.

    Args:
        name: Logger name (typically module name)

    Returns:
        Logger instance under the openrfps namespace
    """
    return logging.getLogger(f"openrfps.{name}")
