"""
keyconf - schema-validated configuration store

Resolves a flat namespace of settings against a persisted key/value store:
every key declared in a schema gets either its stored value (when it
validates) or its default, together with provenance metadata. Invalid
stored values never prevent startup; they are collected for reporting.

Package Structure:
- core/config/: schema declarations, validation, storage backends, resolver
- core/utils/: logging, paths and user notifications
- cli/: the ``keyconf`` command line tool
"""

from keyconf.core.config import (
    ConfigSchema,
    ConfigStore,
    FieldSchema,
    InMemoryStorage,
    JsonFileStorage,
    ResolvedEntry,
    ValidationError,
    create_config_store,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigSchema",
    "ConfigStore",
    "FieldSchema",
    "InMemoryStorage",
    "JsonFileStorage",
    "ResolvedEntry",
    "ValidationError",
    "create_config_store",
    "__version__",
]
