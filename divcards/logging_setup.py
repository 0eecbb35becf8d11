# divcards/logging_setup.py
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from divcards.constants import (
    APP_DIR_NAME,
    LOG_BACKUP_COUNT,
    LOG_FILE_NAME,
    LOG_MAX_BYTES,
)

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
CONSOLE_FORMAT = "[%(levelname)s] %(name)s - %(message)s"


def setup_logging(
    debug: bool = False,
    log_dir: Optional[Path] = None,
    console_level: Optional[int] = None,
) -> Path:
    """
    Route all `divcards.*` loggers to a rotating file and stderr.

    The log file is ``<log_dir>/divcards.log`` (default ``~/.divcards``),
    rotated at ~1 MB with 3 backups. Calling this again replaces the
    handlers from the previous call.

    Args:
        debug: DEBUG instead of INFO.
        log_dir: Where the log file goes.
        console_level: Threshold for stderr only; the file keeps `debug`'s level.

    Returns:
        Path of the log file.
    """
    log_dir = log_dir or Path.home() / APP_DIR_NAME
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for old_handler in list(root_logger.handlers):
        root_logger.removeHandler(old_handler)
        old_handler.close()

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    stderr_handler = logging.StreamHandler()
    stderr_handler.setLevel(level if console_level is None else console_level)
    stderr_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(stderr_handler)

    root_logger.debug(f"Logging to {log_file}")
    return log_file
