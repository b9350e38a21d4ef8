"""Error types raised by utilkit."""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "StorageIOError",
    "UtilkitError",
    "ValidationError",
]


class UtilkitError(Exception):
    """Root exception for all utilkit errors."""


class ConfigurationError(UtilkitError, OSError):
    """Raised when a store cannot be set up at the requested location."""


class ValidationError(UtilkitError, ValueError):
    """Raised for a blank key, a missing value or an unsafe cache key."""


class StorageIOError(UtilkitError, OSError):
    """Raised when an entry cannot be written, read or deserialized."""
