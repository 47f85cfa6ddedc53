"""
Logging configuration for qbench.

Provides centralized logging setup with clean, concise terminal output.
Module loggers (``qbench.*``) propagate to the package logger, so calling
``setup_logger(PACKAGE_LOGGER, level, log_file)`` once reconfigures every
module at the same time.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "qbench"


def _configure(logger: logging.Logger, level: int, log_file: Optional[Path]) -> None:
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Console handler with clean formatting
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    # Clean format: [LEVEL] message
    console_formatter = logging.Formatter(
        fmt='[%(levelname)s] %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # Optional file handler with more detailed format
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)

        file_formatter = logging.Formatter(
            fmt='%(asctime)s [%(levelname)s] %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)
        if level > logging.DEBUG:
            # the file gets DEBUG records even when the console does not
            logger.setLevel(logging.DEBUG)

    # Prevent propagation to root logger
    logger.propagate = False


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (default: INFO)
        log_file: Optional file path for log output

    Returns:
        Configured logger instance
    """
    if name.startswith(PACKAGE_LOGGER + "."):
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        if not package_logger.handlers:
            _configure(package_logger, level, log_file)
        return logging.getLogger(name)

    logger = logging.getLogger(name)
    _configure(logger, level, log_file)
    return logger
