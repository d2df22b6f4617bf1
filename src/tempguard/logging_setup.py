"""Logging configuration for tempguard entrypoints.

Temp paths belong to the process that created them, so every record carries
the pid; a shared log file then shows which process left an orphan behind.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path

_PACKAGE = "tempguard"
_LOG_BYTES = 1 * 1024 * 1024  # 1 MiB per file
_LOG_BACKUPS = 3
_FILE_FORMAT = "%(asctime)s pid=%(process)d [%(levelname)s] %(name)s: %(message)s"
_STDERR_FORMAT = "tempguard[%(process)d]: %(message)s"


def _file_handler(log_file: Path) -> logging.Handler | None:
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=_LOG_BYTES,
            backupCount=_LOG_BACKUPS,
            encoding="utf-8",
        )
    except OSError as exc:
        print(
            f"tempguard: WARNING: could not open log file {log_file}: {exc}",
            file=sys.stderr,
        )
        return None
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return fh


def _stderr_handler(debug: bool) -> logging.Handler:
    # Failed cleanups are WARNING records; in debug mode every removal shows too.
    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(logging.DEBUG if debug else logging.WARNING)
    sh.setFormatter(logging.Formatter(_STDERR_FORMAT))
    return sh


def configure(log_file: Path, *, debug: bool = False, reconfigure: bool = False) -> None:
    """Attach handlers to the tempguard package logger.

    The library itself never calls this; entrypoints such as the CLI do.
    Idempotent unless *reconfigure* is True.
    """
    pkg_logger = logging.getLogger(_PACKAGE)
    if pkg_logger.handlers and not reconfigure:
        return
    for handler in pkg_logger.handlers:
        handler.close()
    pkg_logger.handlers.clear()

    pkg_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    fh = _file_handler(log_file)
    if fh is not None:
        pkg_logger.addHandler(fh)
    pkg_logger.addHandler(_stderr_handler(debug))
    pkg_logger.propagate = False
