"""Reference-counted temp-file handles."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from .errors import DeleteFailed, EmptyHandle
from .handle import BaseHandle, PathArg, UniqueHandle

logger = logging.getLogger(__name__)


class _SharedResource:
    """One UniqueHandle plus the number of SharedHandle owners pointing at it."""

    __slots__ = ("handle", "owners", "_lock")

    def __init__(self, handle: UniqueHandle) -> None:
        self.handle = handle
        self.owners = 1
        self._lock = threading.Lock()

    def acquire(self) -> None:
        with self._lock:
            self.owners += 1

    def release(self) -> bool:
        """Drop one owner; the last one removes the file. Returns True for the last."""
        with self._lock:
            self.owners -= 1
            last = self.owners == 0
        if last:
            self.handle.remove()
        return last


class SharedHandle(BaseHandle):
    """Temp-file path shared by several owners.

    The file is deleted when the last owner is released, either explicitly
    with :meth:`release`, by leaving a ``with`` block, or by garbage
    collection. :meth:`disconnect` acts on the shared resource, so it
    disarms every owner at once.
    """

    _resource: _SharedResource | None = None

    def __init__(self, dir: PathArg | None = None) -> None:
        self._resource = _SharedResource(UniqueHandle(dir))

    @classmethod
    def _attach(cls, resource: _SharedResource) -> "SharedHandle":
        shared = cls.__new__(cls)
        shared._resource = resource
        return shared

    @classmethod
    def from_unique(cls, handle: UniqueHandle) -> "SharedHandle":
        """Take over *handle*'s path; *handle* is left empty and will not delete."""
        return cls._attach(_SharedResource(handle.move()))

    @property
    def path(self) -> Path | None:
        resource = self._resource
        if resource is None:
            return None
        return resource.handle.path

    @property
    def use_count(self) -> int:
        resource = self._resource
        return 0 if resource is None else resource.owners

    def share(self) -> "SharedHandle":
        """Return a new owner of the same resource."""
        resource = self._resource
        if resource is None:
            raise EmptyHandle("share a released handle")
        resource.acquire()
        return self._attach(resource)

    def __copy__(self) -> "SharedHandle":
        return self.share()

    def __deepcopy__(self, memo):
        raise TypeError("SharedHandle cannot be deep-copied; use share()")

    def disconnect(self) -> Path | None:
        resource = self._resource
        if resource is None:
            return None
        return resource.handle.disconnect()

    def release(self) -> None:
        """Give up this owner's interest. Calling it again does nothing."""
        resource, self._resource = self._resource, None
        if resource is None:
            return
        try:
            resource.release()
        except DeleteFailed as exc:
            logger.warning("%s", exc)

    def _finalize(self) -> None:
        self.release()
