"""Logging setup for the ``shiftplan`` logger namespace."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

logger = logging.getLogger("shiftplan")


def configure_logging(level: str = "INFO", log_file: str | Path | None = None) -> logging.Logger:
    """
    Attach stdout (and optionally file) handlers to the package logger.

    Safe to call more than once: handlers are only added the first time.

    Args:
        level: Logging level name (e.g., "INFO", "DEBUG")
        log_file: Optional path of a log file; parent directory is created

    Returns:
        The configured ``shiftplan`` logger
    """
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # Prevent duplicate handlers if configured multiple times
    if logger.handlers:
        return logger

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(stream_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    return logger
