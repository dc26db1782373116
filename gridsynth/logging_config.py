"""
Centralized logging configuration for gridsynth.

The library itself never configures logging: modules only create loggers
under the "gridsynth" namespace. Applications embedding the generator call
setup_logging() once at startup to get the output.

Usage:
    from gridsynth.logging_config import setup_logging
    setup_logging("logs")  # DEBUG to logs/debug.log, WARNING+ to console

Ban-level traces are logged at DEBUG and can be very verbose on large grids.
"""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path


# Global configuration
ROOT_LOGGER_NAME = "gridsynth"
LOG_FILE_NAME = "debug.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB per file
BACKUP_COUNT = 5  # Keep 5 backup files

_logging_initialized = False


def setup_logging(
    log_dir: Path | str | None = None,
    log_level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
) -> Path | None:
    """
    Configure the logging system for gridsynth.

    Args:
        log_dir: Directory for the rotating log file (None = console only)
        log_level: Level for file logging (default: DEBUG)
        console_level: Level for console output (default: WARNING)

    Returns:
        Path to the log file, or None when logging to console only
    """
    global _logging_initialized

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(min(log_level, console_level))

    # Clear any existing handlers (for re-initialization)
    root_logger.handlers.clear()

    log_path: Path | None = None
    if log_dir is not None:
        log_dir_path = Path(log_dir)
        log_dir_path.mkdir(parents=True, exist_ok=True)
        log_path = log_dir_path / LOG_FILE_NAME

        # File handler with rotation
        file_formatter = logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-35s | %(funcName)-25s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=MAX_LOG_SIZE,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    # Console handler (less verbose)
    console_formatter = logging.Formatter(
        fmt="%(levelname)-8s | %(name)-25s | %(message)s"
    )
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    # Log startup
    if not _logging_initialized:
        root_logger.info("=" * 80)
        root_logger.info(f"gridsynth logging initialized at {datetime.now().isoformat()}")
        if log_path is not None:
            root_logger.info(f"Log file: {log_path.absolute()}")
        root_logger.info("=" * 80)
        _logging_initialized = True

    return log_path


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger configured as child of the gridsynth logger
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# =============================================================================
# Structured Logging Helpers
# =============================================================================


def log_rules_built(
    logger: logging.Logger,
    original_models: int,
    variants: int,
    details: str | None = None,
) -> None:
    """Log a successful rules compilation."""
    details_str = f" | {details}" if details else ""
    logger.debug(f"RULES | built | models={original_models} | variants={variants}{details_str}")


def log_attempt(
    logger: logging.Logger,
    seed: int,
    try_index: int,
    max_tries: int,
    status: str,
    details: str | None = None,
) -> None:
    """Log one generation attempt of a retry loop."""
    details_str = f" | {details}" if details else ""
    logger.info(f"SEED {seed} | TRY {try_index}/{max_tries} | {status}{details_str}")


def log_reseed(
    logger: logging.Logger,
    previous_seed: int,
    new_seed: int,
) -> None:
    """Log a reinitialization with a derived seed."""
    logger.info(f"SEED {previous_seed} | REINITIALIZE | new_seed={new_seed}")


def log_contradiction(
    logger: logging.Logger,
    seed: int,
    node_index: int,
    details: str | None = None,
) -> None:
    """Log a contradiction found during propagation."""
    details_str = f" | {details}" if details else ""
    logger.debug(f"SEED {seed} | CONTRADICTION | node={node_index}{details_str}")
