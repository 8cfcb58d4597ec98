"""Logging configuration for FreeFlow."""

import logging
import sys
from datetime import datetime
from pathlib import Path

from core.config import default_data_dir

ROOT_LOGGER = "freeflow"


def setup_logging(
    log_dir: Path | None = None,
    level: int = logging.INFO,
    console: bool = True,
    file: bool = True,
) -> logging.Logger:
    """Configure the application logger.

    Args:
        log_dir: Directory for log files. If None, uses ``<data dir>/logs``.
        level: Logging level (default: INFO)
        console: Whether to log to stdout
        file: Whether to log to a dated file

    Returns:
        The ``freeflow`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    # streamlit reruns the script on every interaction
    logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if file:
        if log_dir is None:
            log_dir = default_data_dir() / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f"freeflow_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger, e.g. ``get_logger("store")`` -> ``freeflow.store``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
