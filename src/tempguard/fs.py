"""Filesystem and byte-stream primitives with explicit permission control."""

from __future__ import annotations

import os
import secrets
import stat
import tempfile
from pathlib import Path
from typing import IO

from . import config

OWNER_ONLY = 0o600
NAME_PREFIX = "tempguard-"

# O_EXCL makes the open fail atomically if anything (file or symlink) already
# sits at the path. O_NOFOLLOW/O_CLOEXEC/O_BINARY only exist on some platforms.
_EXCLUSIVE_FLAGS = (
    os.O_CREAT
    | os.O_EXCL
    | os.O_RDWR
    | getattr(os, "O_NOFOLLOW", 0)
    | getattr(os, "O_CLOEXEC", 0)
    | getattr(os, "O_BINARY", 0)
)


def temp_directory() -> Path:
    """Configured temp directory, falling back to the platform default."""
    configured = config.current().get("temp_dir")
    if configured:
        return Path(configured).expanduser()
    return Path(tempfile.gettempdir())


def unique_name(suffix: str | None = None) -> Path:
    """Collision-resistant bare file name, e.g. ``tempguard-3f9c...e1.tmp``."""
    if suffix is None:
        suffix = config.current().get("suffix") or ""
    return Path(f"{NAME_PREFIX}{secrets.token_hex(16)}{suffix}")


def exists(path: Path) -> bool:
    return os.path.lexists(path)


def is_directory(path: Path) -> bool:
    return path.is_dir()


def is_regular_file(path: Path) -> bool:
    """True only for a regular file; a symlink to one does not count."""
    try:
        return stat.S_ISREG(os.lstat(path).st_mode)
    except FileNotFoundError:
        return False


def remove(path: Path) -> None:
    """Delete *path*; a missing file is not an error."""
    path.unlink(missing_ok=True)


def open_exclusive_rw(path: Path, mode: int = OWNER_ONLY) -> int:
    """Open a new file for read/write, failing if *path* already exists."""
    return os.open(str(path), _EXCLUSIVE_FLAGS, mode)


def open_for_read_write(fd: int, *, text: bool = False, encoding: str | None = None) -> IO:
    """Wrap *fd* in a file object that owns it.

    The descriptor is closed when the returned object is closed. If wrapping
    fails the descriptor is closed here.
    """
    try:
        if text:
            return open(fd, "r+", encoding=encoding or "utf-8", closefd=True)
        return open(fd, "r+b", closefd=True)
    except BaseException:
        os.close(fd)
        raise
