"""
Exceptions raised by the configuration store.

Validation failures of stored values are not exceptions: they are collected
as ``ValidationError`` records (see ``validation.py``) and surfaced through
``ConfigStore.get_stored_config_errors``. The classes below cover the cases
that do propagate to the caller.
"""

from typing import Any, Dict, Optional


class ConfigStoreError(Exception):
    """Base exception for configuration store errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """
        Initialize the error.

        Args:
            message: Error message
            context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class UnknownKeyError(ConfigStoreError, KeyError):
    """Raised when a key that the schema does not declare is used."""

    def __init__(self, key: str):
        super().__init__(f"Unknown configuration key: {key!r}", {"key": key})
        self.key = key

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the whole message.
        return self.message


class StorageWriteError(ConfigStoreError):
    """Raised when writing a value through to storage fails."""

    def __init__(self, key: str, reason: str = ""):
        message = f"Failed to write configuration key {key!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message, {"key": key})
        self.key = key


class SchemaError(ConfigStoreError, ValueError):
    """Raised when a schema declaration is itself invalid."""
