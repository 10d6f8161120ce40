"""
Exceptions raised by DePict.

Tree operations never raise for well-formed input; only the persistence
boundary and the hashing layer can fail.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class DepictError(Exception):
    """Base class for all DePict errors."""


class TreeCorruptedError(DepictError):
    """Raised when a persisted tree snapshot cannot be parsed into nodes."""

    def __init__(self, message: str, path: Optional[str | Path] = None):
        self.path = str(path) if path is not None else None
        if self.path:
            message = f"{self.path}: {message}"
        super().__init__(message)


class HashComputationError(DepictError):
    """Raised when an image cannot be decoded or fingerprinted."""


__all__ = ['DepictError', 'TreeCorruptedError', 'HashComputationError']
