"""Logging setup for the viewer.

The terminal is owned by the frame renderer, so log records go to a file
under the user log directory and never to stdout or stderr.
"""

from __future__ import annotations

import errno
import logging
import os
from pathlib import Path

from platformdirs import user_log_dir

from .config import APP_NAME, DEFAULT_LOG_LEVEL

LOG_FILENAME = "lineviewer.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def configure_logging(level: str = DEFAULT_LOG_LEVEL, log_path: Path | None = None) -> logging.Handler:
    """Attach one handler to the package logger and return it.

    The file is opened on the first record, so quiet runs leave nothing
    behind. Falls back to a ``NullHandler`` when the file cannot be written.
    """
    package_logger = logging.getLogger("lineviewer")
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
        existing.close()

    target = log_path if log_path is not None else default_log_path()
    handler: logging.Handler
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        if target.exists() and not os.access(target, os.W_OK):
            raise PermissionError(errno.EACCES, "log file is not writable", str(target))
        handler = logging.FileHandler(target, encoding="utf-8", delay=True)
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level, logging.WARNING))
    package_logger.propagate = False
    return handler
