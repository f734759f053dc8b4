from __future__ import annotations
from typing import Optional


class SensorMergeError(Exception):
    """Base exception for all merge engine errors."""

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class ConfigError(SensorMergeError):
    """Raised when an operation or mapping configuration is invalid."""


class UnsupportedOperationError(ConfigError):
    """Raised for operation kinds other than 'merge'."""


class MappingError(SensorMergeError, ValueError):
    """Raised when a mapping rule cannot be applied to a source document."""


class MalformedRecordError(SensorMergeError, ValueError):
    """Raised when the terminal field fires before the record is complete."""
