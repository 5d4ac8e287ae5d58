"""
Centralized Logging Configuration

This module provides unified logging configuration for snapback and its
worker processes. It keeps log formats, levels, and behavior consistent
between the main process and the processing pool.

Log Level Conventions:
    DEBUG   - File-by-file operations, tool command lines, matching details
    INFO    - Phase transitions, counts, high-level progress
    WARNING - Recoverable issues, unmatched files, degraded overlays
    ERROR   - Tool failures, move failures, fatal startup problems

Example:
    >>> import logging
    >>> from common.logging_config import setup_logging
    >>> setup_logging(verbose=True, log_file="logs/snapback.log")
    >>> logger = logging.getLogger(__name__)
    >>> logger.info("Processing started")
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

# =============================================================================
# Format Constants
# =============================================================================

LOG_FORMAT_DETAILED = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
"""Detailed format including timestamp and module name, used for verbose/file logging."""

LOG_FORMAT_SIMPLE = "%(levelname)s: %(message)s"
"""Simple format for non-verbose console output."""

LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
"""Standard date format for all log timestamps."""

SUPPRESSED_LOGGERS: List[str] = [
    "PIL",
    "PIL.Image",
    "PIL.PngImagePlugin",
]
"""Third-party logger names to suppress to WARNING level."""

APP_MODULES: List[str] = [
    "common.archive",
    "common.exiftool",
    "common.overlay",
    "processors.snapchat_memories",
]
"""Application loggers enabled at DEBUG inside worker processes."""


def default_log_file(logs_dir: str = "logs") -> Path:
    """Return a timestamped log file path, creating the logs directory."""
    directory = Path(logs_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return directory / f"snapback_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"


def setup_logging(
    verbose: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """Configure logging for a snapback run.

    In info mode (verbose=False) the console shows only ERROR messages so the
    progress bars stay readable. In verbose mode the console shows INFO and
    above, and the optional log file captures everything at DEBUG.

    Args:
        verbose: If True, enable verbose console output
        log_file: Optional path to a log file for persistent logging

    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Clear any existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO if verbose else logging.ERROR)
    if verbose:
        formatter = logging.Formatter(LOG_FORMAT_DETAILED, datefmt=LOG_DATE_FORMAT)
    else:
        formatter = logging.Formatter(LOG_FORMAT_SIMPLE)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(LOG_FORMAT_DETAILED, datefmt=LOG_DATE_FORMAT)
        )
        root_logger.addHandler(file_handler)

    for library in SUPPRESSED_LOGGERS:
        logging.getLogger(library).setLevel(logging.WARNING)

    return root_logger


def init_worker_logging(log_filename: Optional[str] = None) -> None:
    """Initialize logging for worker processes (multiprocessing).

    Worker processes started with spawn/forkserver don't inherit the parent's
    handlers, so each worker attaches its own file handler when a log file is
    in use.

    Args:
        log_filename: Path to the run's log file. If None, only suppresses
                     third-party loggers.
    """
    if log_filename:
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.INFO)

        already_attached = any(
            isinstance(h, logging.FileHandler)
            and Path(h.baseFilename) == Path(log_filename).resolve()
            for h in root_logger.handlers
        )
        if not already_attached:
            file_handler = logging.FileHandler(log_filename, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter(LOG_FORMAT_DETAILED, datefmt=LOG_DATE_FORMAT)
            )
            root_logger.addHandler(file_handler)

        for module in APP_MODULES:
            logging.getLogger(module).setLevel(logging.DEBUG)

    for library in SUPPRESSED_LOGGERS:
        logging.getLogger(library).setLevel(logging.WARNING)