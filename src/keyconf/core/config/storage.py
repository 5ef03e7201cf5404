"""Key/value storage backends for persisted configuration values."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, Union
import copy
import hashlib
import json

from keyconf.core.utils.logger import log_file_operation, log_warning

from .errors import StorageWriteError

STORE_SCHEMA_VERSION = 1


class KeyValueStorage(Protocol):
    """
    Durable map from string key to a persisted value.

    ``get`` returns ``None`` for keys that hold no value. ``put`` raises
    ``StorageWriteError`` when the value cannot be persisted.
    """

    def get(self, key: str) -> Any:
        ...

    def put(self, key: str, value: Any) -> None:
        ...


class InMemoryStorage:
    """Dict-backed storage, for tests and hosts that persist elsewhere."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def as_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)


def _wrap_store(values: Dict[str, Any]) -> Dict[str, Any]:
    return {"schema_version": STORE_SCHEMA_VERSION, "config": values}


def _unwrap_store(payload: Dict[str, Any]) -> Dict[str, Any]:
    if "config" in payload and isinstance(payload["config"], dict):
        return payload["config"]
    return payload


class JsonFileStorage:
    """
    Storage backed by a single JSON file.

    The file is read once at construction. Every ``put`` rewrites the whole
    file atomically (temp file, then replace). A missing file is an empty
    store; an unreadable or corrupt one is logged and treated as empty.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            log_warning("storage", f"Ignoring unreadable store file: {e}", str(self.path))
            return {}
        if not isinstance(payload, dict):
            log_warning("storage", "Ignoring store file without a top-level object", str(self.path))
            return {}
        log_file_operation("read", str(self.path), True)
        return dict(_unwrap_store(payload))

    def get(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))

    def put(self, key: str, value: Any) -> None:
        updated = dict(self._data)
        updated[key] = value
        try:
            self._write(updated)
        except (OSError, TypeError, ValueError) as e:
            log_file_operation("write", str(self.path), False, str(e))
            raise StorageWriteError(key, str(e)) from e
        self._data = updated
        log_file_operation("write", str(self.path), True)

    def _write(self, values: Dict[str, Any]) -> None:
        text = json.dumps(_wrap_store(values), indent=2, allow_nan=False)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        temp_path.write_text(text, encoding="utf-8")
        temp_path.replace(self.path)

    def as_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)


def compute_config_hash(values: Mapping[str, Any]) -> str:
    payload = json.dumps(dict(values), sort_keys=True, separators=(",", ":"), ensure_ascii=True)
    return f"sha256:{hashlib.sha256(payload.encode('utf-8')).hexdigest()}"
