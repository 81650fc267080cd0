"""
logger.py

Responsibility: Configures Python's standard logging for the one-shot updater
run: timestamped lines on stdout and, optionally, appended to a log file.
Does NOT: decide what gets logged; modules use logging.getLogger(__name__).
"""

from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Handlers added by configure_logging(), replaced on the next call
_installed_handlers: list[logging.Handler] = []


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """
    Installs stdout (and optional file) handlers on the root logger.

    Safe to call more than once: handlers from a previous call are replaced,
    handlers installed by anything else are left alone.

    Args:
        level: Log level name, e.g. "INFO" or "DEBUG". Unknown names fall
               back to INFO.
        log_file: Optional path of a file to append log lines to. Its parent
                  directory is created when missing.

    Returns:
        None
    """
    root = logging.getLogger()
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)
    _installed_handlers.append(stream_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        _installed_handlers.append(file_handler)

    level_int = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(level_int, int):
        level_int = logging.INFO
    root.setLevel(level_int)

    # httpx logs every request at INFO; keep it out of the run summary
    logging.getLogger("httpx").setLevel(logging.WARNING)
