"""
Unified output system using Loguru.
Writes user-facing messages to the terminal and everything to the log file.
"""

import sys
import threading
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import LoggingConfig, get_data_dir

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def get_log_file(logging_config: LoggingConfig) -> Path:
    """Resolve the log file path, defaulting to the data directory."""
    if logging_config.log_file:
        return Path(logging_config.log_file).expanduser()
    return get_data_dir() / "mpd-minion.log"


def setup_loguru(
    log_file: Path,
    level: str = "INFO",
    console_output: bool = False,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    """
    Configure loguru for file logging, optionally mirrored to stderr.

    Args:
        log_file: Path to log file
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
        console_output: Also write log records to stderr
        max_file_size_mb: Rotate the file at this size
        backup_count: Number of rotated files to keep
    """
    # Remove default handler
    logger.remove()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation=f"{max_file_size_mb} MB",
        retention=backup_count,
        level=level,
        format=LOG_FORMAT,
        enqueue=False,  # Synchronous writes (thread-safe but blocking)
    )

    if console_output:
        logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def setup_from_config(logging_config: LoggingConfig, level: Optional[str] = None) -> None:
    setup_loguru(
        get_log_file(logging_config),
        level=level or logging_config.level,
        console_output=logging_config.console_output,
        max_file_size_mb=logging_config.max_file_size_mb,
        backup_count=logging_config.backup_count,
    )


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to the log file AND prints for the user.

    Threads marked with ``silent_logging = True`` (background workers) only
    write to the log file.

    Args:
        message: User-facing message
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    silent = getattr(threading.current_thread(), "silent_logging", False)
    if not silent:
        stream = sys.stderr if level in ("warning", "error") else sys.stdout
        print(message, file=stream)
