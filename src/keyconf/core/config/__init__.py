"""Configuration schema, storage and resolution."""

from .errors import ConfigStoreError, SchemaError, StorageWriteError, UnknownKeyError
from .schema import (
    ConfigSchema,
    FieldSchema,
    boolean_field,
    dict_field,
    enum_field,
    flatten,
    integer_field,
    list_field,
    load_schema,
    number_field,
    string_field,
    unflatten,
)
from .validation import (
    ValidationError,
    ValidationResult,
    format_config_errors,
    validate_value,
)
from .storage import (
    STORE_SCHEMA_VERSION,
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorage,
    compute_config_hash,
)
from .resolver import ConfigStore, EntryMetadata, ResolvedEntry, create_config_store
from .coercion import coerce

__all__ = [
    "ConfigSchema",
    "ConfigStore",
    "ConfigStoreError",
    "EntryMetadata",
    "FieldSchema",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorage",
    "ResolvedEntry",
    "STORE_SCHEMA_VERSION",
    "SchemaError",
    "StorageWriteError",
    "UnknownKeyError",
    "ValidationError",
    "ValidationResult",
    "boolean_field",
    "coerce",
    "compute_config_hash",
    "create_config_store",
    "dict_field",
    "enum_field",
    "flatten",
    "format_config_errors",
    "integer_field",
    "list_field",
    "load_schema",
    "number_field",
    "string_field",
    "unflatten",
    "validate_value",
]
