"""Exclusively owned temp-file paths.

A handle is *armed* while it holds a path it will delete, and *disarmed*
(``path is None``) after :meth:`UniqueHandle.disconnect`, :meth:`UniqueHandle.remove`
or a move. Dropping an armed handle deletes its file on a best-effort basis.
"""

from __future__ import annotations

import functools
import logging
import os
from pathlib import Path
from typing import IO, Any, Union

from . import fs
from .errors import CreateFailed, CreationRaceOrCorruption, DeleteFailed, EmptyHandle

logger = logging.getLogger(__name__)

PathArg = Union[str, "os.PathLike[str]"]


def resolve_target(dir: PathArg | None = None) -> Path:
    """Return the path a new handle should own.

    No argument gives a fresh name in the temp directory, an existing
    directory gives a fresh name inside it, and anything else is used as is.
    Relative targets are anchored to the current directory at construction,
    so a later ``chdir`` does not change which file the handle deletes.
    """
    if dir is None:
        return fs.temp_directory() / fs.unique_name()
    if not os.fspath(dir):
        raise ValueError("Temp file target must not be an empty path")
    target = Path(dir).absolute()
    if fs.is_directory(target):
        return target / fs.unique_name()
    return target


def secure_create(path: Path) -> int:
    """Exclusively create *path* with owner-only permissions and return its fd."""
    try:
        fd = fs.open_exclusive_rw(path)
    except OSError as exc:
        raise CreateFailed(path, exc.strerror or str(exc)) from exc

    if not fs.exists(path):
        detail = "path does not exist"
    elif not fs.is_regular_file(path):
        detail = "path is not a regular file"
    else:
        return fd
    os.close(fd)
    raise CreationRaceOrCorruption(path, detail)


def _ordering_key(path: Path | None) -> tuple:
    # Disarmed handles sort first and are equal to each other.
    return (0,) if path is None else (1, path)


@functools.total_ordering
class BaseHandle:
    """Operations shared by every handle kind.

    Subclasses provide :attr:`path` and ``_finalize`` (what happens when the
    handle leaves a ``with`` block or is garbage collected).
    """

    @property
    def path(self) -> Path | None:
        raise NotImplementedError

    def is_empty(self) -> bool:
        return self.path is None

    def __bool__(self) -> bool:
        return not self.is_empty()

    def _armed_path(self, operation: str) -> Path:
        path = self.path
        if path is None:
            raise EmptyHandle(operation)
        return path

    def secure_create_fd(self) -> int:
        """Create the file with exclusive RW access and 0600 permissions.

        The caller owns the returned descriptor and must close it.
        """
        return secure_create(self._armed_path("create a file"))

    def secure_create_file(self) -> None:
        os.close(self.secure_create_fd())

    def secure_create_stream(self, *, text: bool = False, encoding: str | None = None) -> IO[Any]:
        """Create the file and return a read/write stream that owns the descriptor."""
        return fs.open_for_read_write(self.secure_create_fd(), text=text, encoding=encoding)

    def __fspath__(self) -> str:
        return str(self._armed_path("convert to a filesystem path"))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BaseHandle):
            return NotImplemented
        return _ordering_key(self.path) == _ordering_key(other.path)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, BaseHandle):
            return NotImplemented
        return _ordering_key(self.path) < _ordering_key(other.path)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r})"

    def _finalize(self) -> None:
        try:
            self.remove()  # type: ignore[attr-defined]
        except DeleteFailed as exc:
            logger.warning("%s", exc)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._finalize()

    def __del__(self) -> None:
        try:
            self._finalize()
        except Exception:
            logger.debug("Cleanup of %s failed", type(self).__name__, exc_info=True)


class UniqueHandle(BaseHandle):
    """Sole owner of one temp-file path; deletes the file when dropped.

    Copying is refused; use :meth:`move` to hand ownership to a new handle.
    """

    _path: Path | None = None

    def __init__(self, dir: PathArg | None = None) -> None:
        self._path = resolve_target(dir)

    @classmethod
    def _adopt(cls, path: Path | None) -> "UniqueHandle":
        handle = cls.__new__(cls)
        handle._path = path
        return handle

    @property
    def path(self) -> Path | None:
        return self._path

    def move(self) -> "UniqueHandle":
        """Transfer ownership to a new handle, leaving this one empty."""
        return UniqueHandle._adopt(self.disconnect())

    def disconnect(self) -> Path | None:
        """Stop owning the path and return it; the file is left alone."""
        path, self._path = self._path, None
        return path

    def remove(self) -> None:
        """Delete the file (if present) and disarm the handle.

        The path is cleared before the delete, so a second call is a no-op.
        """
        path = self.disconnect()
        if path is None:
            return
        try:
            fs.remove(path)
        except OSError as exc:
            raise DeleteFailed(path, exc.strerror or str(exc)) from exc
        logger.debug("Removed temp file %s", path)

    def __copy__(self):
        raise TypeError("UniqueHandle cannot be copied; use move() or SharedHandle.from_unique()")

    def __deepcopy__(self, memo):
        raise TypeError("UniqueHandle cannot be copied; use move() or SharedHandle.from_unique()")
