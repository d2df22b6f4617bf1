"""Ownership-tracking handles for temporary files."""

from .errors import (
    CreateFailed,
    CreationRaceOrCorruption,
    DeleteFailed,
    EmptyHandle,
    TempGuardError,
)
from .handle import UniqueHandle
from .registry import ProcessRegistry, TrackedHandle, default_registry
from .shared import SharedHandle

__all__ = [
    "CreateFailed",
    "CreationRaceOrCorruption",
    "DeleteFailed",
    "EmptyHandle",
    "ProcessRegistry",
    "SharedHandle",
    "TempGuardError",
    "TrackedHandle",
    "UniqueHandle",
    "default_registry",
]
