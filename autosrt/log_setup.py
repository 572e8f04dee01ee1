"""Logging configuration for AutoSrt."""

import logging
import sys
from logging.handlers import RotatingFileHandler
import os
from typing import Optional
from .utils import ensure_dir_exists

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(threadName)s] [%(name)s:%(lineno)d] - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Client libraries that log every request at INFO/DEBUG
NOISY_LOGGERS = ("google", "google.auth", "urllib3", "grpc")

def _file_handler(log_dir: str, log_file: str, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    ensure_dir_exists(log_dir)
    return RotatingFileHandler(
        os.path.join(log_dir, log_file),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )

def setup_logging(
    log_level: int = logging.INFO,
    log_dir: Optional[str] = "logs",
    log_file: str = "autosrt.log",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    max_bytes: int = 10 * 1024 * 1024, # 10 MB
    backup_count: int = 5
) -> None:
    """
    Configures the root logger: stdout plus an optional rotating log file.

    The entry points call this twice, once before the config is read
    (console only) and once with the configured log location. Each call
    replaces the handlers installed by the previous one.

    Args:
        log_level: The minimum logging level (e.g., logging.INFO, logging.DEBUG).
        log_dir: Directory for the log file. None logs to the console only.
        log_file: The name of the log file inside log_dir.
        log_format: The format string for log messages. Includes the thread
                    name so concurrent pipeline runs can be told apart.
        date_format: The format string for timestamps in logs.
        max_bytes: Size at which the log file is rotated.
        backup_count: Number of rotated files to keep.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    root.setLevel(log_level)
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    console.setLevel(log_level)
    root.addHandler(console)

    if log_dir:
        try:
            file_handler = _file_handler(log_dir, log_file, max_bytes, backup_count)
        except Exception as e:
            # Keep going with console logging only
            root.error(f"Failed to set up file logging handler at {log_dir}/{log_file}: {e}", exc_info=True)
        else:
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
            root.info(f"Logging initialized. Log file: {file_handler.baseFilename}")

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
