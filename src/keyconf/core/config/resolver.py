"""Config resolution: stored values merged with schema defaults, with provenance."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Literal, Optional
import copy

from keyconf.core.utils.logger import (
    log_configuration_change,
    log_debug,
    log_error,
    log_warning,
)

from .errors import StorageWriteError, UnknownKeyError
from .schema import ConfigSchema, unflatten
from .storage import KeyValueStorage
from .validation import ValidationError

SourceLabel = Literal["default", "stored"]


@dataclass(frozen=True)
class EntryMetadata:
    is_stored: bool


@dataclass(frozen=True)
class ResolvedEntry:
    value: Any
    metadata: EntryMetadata


class ConfigStore:
    """
    Resolves every schema key against a key/value storage.

    Storage is read once, at construction. Each key is validated on its
    own: an invalid stored value falls back to the schema default and its
    error is recorded, without affecting any other key. ``set`` writes
    through to storage and then updates the cached entry.

    Instances are not thread-safe; callers sharing one store across threads
    must serialize access themselves.
    """

    def __init__(self, schema: ConfigSchema, storage: KeyValueStorage):
        self._schema = schema
        self._storage = storage
        self._entries: Dict[str, ResolvedEntry] = {}
        self._errors: List[ValidationError] = []
        for key in schema:
            self._entries[key] = self._resolve_key(key)

    def _resolve_key(self, key: str) -> ResolvedEntry:
        field_schema = self._schema[key]
        default_entry = ResolvedEntry(
            value=copy.deepcopy(field_schema.default),
            metadata=EntryMetadata(is_stored=False),
        )
        try:
            raw = self._storage.get(key)
        except Exception as e:
            log_error("config", f"Failed to read stored value for '{key}'", exception=e)
            return default_entry
        if raw is None:
            return default_entry

        result = field_schema.validate(raw, key)
        if not result.ok:
            self._errors.append(result.error)
            log_warning(
                "config",
                f"Stored value for '{key}' is invalid, using default",
                result.error.message,
            )
            return default_entry
        log_debug("config", f"Using stored value for '{key}'")
        return ResolvedEntry(value=result.value, metadata=EntryMetadata(is_stored=True))

    @property
    def schema(self) -> ConfigSchema:
        return self._schema

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, key: str) -> ResolvedEntry:
        try:
            return self._entries[key]
        except KeyError:
            raise UnknownKeyError(key) from None

    def set(self, key: str, value: Any) -> None:
        """
        Persist ``value`` for ``key`` and make it the resolved value.

        The value is not validated; callers pass a value of the field's type.
        If the storage write fails the cached entry is left untouched.

        Raises:
            UnknownKeyError: If the schema does not declare ``key``
            StorageWriteError: If the storage write fails
        """
        previous = self.get(key)
        try:
            self._storage.put(key, value)
        except StorageWriteError:
            raise
        except OSError as e:
            raise StorageWriteError(key, str(e)) from e
        self._entries[key] = ResolvedEntry(value=value, metadata=EntryMetadata(is_stored=True))
        log_configuration_change(key, previous.value, value)

    def get_stored_config_errors(self) -> Optional[List[ValidationError]]:
        """
        Validation errors found while resolving stored values.

        This is a snapshot taken at construction; ``set`` does not change it.

        Returns:
            Errors in schema declaration order, or None if every stored
            value was valid
        """
        if not self._errors:
            return None
        return list(self._errors)

    def entries(self) -> Dict[str, ResolvedEntry]:
        return dict(self._entries)

    def sources_by_key(self) -> Dict[str, SourceLabel]:
        return {
            key: "stored" if entry.metadata.is_stored else "default"
            for key, entry in self._entries.items()
        }

    def as_dict(self, nested: bool = False) -> Dict[str, Any]:
        """Resolved values keyed by schema key, or unflattened when ``nested``."""
        values = {key: entry.value for key, entry in self._entries.items()}
        return unflatten(values) if nested else values


def create_config_store(schema: ConfigSchema, storage: KeyValueStorage) -> ConfigStore:
    return ConfigStore(schema, storage)
