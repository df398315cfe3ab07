"""Logging configuration for topic-radar."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "topic_radar"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(
    level: str = "INFO",
    log_file: str | Path | None = None,
    max_size_mb: int = 10,
    backup_count: int = 5,
    verbose: bool = False,
) -> logging.Logger:
    """Configure the package logger once; later calls only adjust the level.

    Console records go to stderr so ``--json`` output on stdout stays parseable.
    """
    logger = logging.getLogger(LOGGER_NAME)
    effective = "DEBUG" if verbose else level
    logger.setLevel(getattr(logging, str(effective).upper(), logging.INFO))

    if logger.handlers:
        return logger

    fmt = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.addHandler(console)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Get the package logger, or a dotted child of it (``topic_radar.<name>``)."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)
