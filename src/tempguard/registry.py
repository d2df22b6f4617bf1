"""Process-wide registry of temp paths that still need deleting.

In this variant the registry's membership, not the number of live handles,
decides what is cleaned up: whatever is still registered when the process
exits is removed by :meth:`ProcessRegistry.shutdown`.
"""

from __future__ import annotations

import atexit
import logging
import threading
from pathlib import Path

from . import fs
from .errors import DeleteFailed
from .handle import BaseHandle, PathArg, resolve_target

logger = logging.getLogger(__name__)


class ProcessRegistry:
    """Lock-guarded set of pending temp paths.

    The lock covers set mutation only; files are deleted outside it.
    """

    def __init__(self) -> None:
        self._paths: set[Path] = set()
        self._lock = threading.Lock()
        self._closed = False

    def insert(self, path: Path) -> None:
        with self._lock:
            if not self._closed:
                self._paths.add(path)
                return
        logger.warning("Registry already shut down; %s will not be removed at exit", path)

    def erase(self, path: Path) -> None:
        with self._lock:
            self._paths.discard(path)

    def paths(self) -> frozenset[Path]:
        with self._lock:
            return frozenset(self._paths)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._paths

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)

    @property
    def closed(self) -> bool:
        return self._closed

    def shutdown(self) -> list[Path]:
        """Delete every registered path once; return the ones that could not be removed."""
        with self._lock:
            if self._closed:
                return []
            self._closed = True
            pending, self._paths = self._paths, set()

        failed: list[Path] = []
        for path in sorted(pending):
            try:
                fs.remove(path)
            except OSError:
                logger.warning("Exception while removing temp file %s", path, exc_info=True)
                failed.append(path)
        if pending:
            logger.debug("Registry shutdown removed %d of %d temp file(s)",
                         len(pending) - len(failed), len(pending))
        return failed


_default: ProcessRegistry | None = None
_default_lock = threading.Lock()


def default_registry() -> ProcessRegistry:
    """Process-wide registry, created on first use and swept at interpreter exit.

    Other ``atexit`` callbacks may run before or after the sweep.
    """
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                registry = ProcessRegistry()
                atexit.register(registry.shutdown)
                _default = registry
    return _default


class TrackedHandle(BaseHandle):
    """Temp-file handle whose pending deletion is recorded in a registry.

    The path is registered on construction and erased exactly once, by
    :meth:`disconnect` or by a successful :meth:`remove`. A path whose delete
    fails stays registered so the shutdown sweep tries again.
    """

    _path: Path | None = None

    def __init__(self, dir: PathArg | None = None, *, registry: ProcessRegistry | None = None) -> None:
        self._registry = registry if registry is not None else default_registry()
        self._path = resolve_target(dir)
        self._registry.insert(self._path)

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def registry(self) -> ProcessRegistry:
        return self._registry

    def disconnect(self) -> Path | None:
        path, self._path = self._path, None
        if path is not None:
            self._registry.erase(path)
        return path

    def remove(self) -> None:
        path, self._path = self._path, None
        if path is None:
            return
        try:
            fs.remove(path)
        except OSError as exc:
            raise DeleteFailed(path, exc.strerror or str(exc)) from exc
        self._registry.erase(path)
        logger.debug("Removed tracked temp file %s", path)

    def __copy__(self):
        raise TypeError("TrackedHandle cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("TrackedHandle cannot be copied")
