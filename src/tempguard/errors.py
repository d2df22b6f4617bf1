"""Error kinds raised by tempguard handles."""

from __future__ import annotations

from pathlib import Path


class TempGuardError(Exception):
    """Base class for every error tempguard raises."""


class EmptyHandle(TempGuardError):
    def __init__(self, operation: str) -> None:
        super().__init__(f"Cannot {operation}: handle holds no path")
        self.operation = operation


class CreateFailed(TempGuardError):
    """The OS refused the exclusive create (path exists, permission denied, ...)."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not create temp file {path}: {reason}")
        self.path = path


class CreationRaceOrCorruption(TempGuardError):
    """Post-creation validation found the path missing or not a regular file."""

    def __init__(self, path: Path, detail: str) -> None:
        super().__init__(f"Temp file {path} failed validation after creation: {detail}")
        self.path = path


class DeleteFailed(TempGuardError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not delete temp file {path}: {reason}")
        self.path = path
