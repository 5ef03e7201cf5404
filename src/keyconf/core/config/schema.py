"""Schema declarations: per-key fields and the immutable key -> field mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional, Union
import copy
import json
import math

from .errors import SchemaError
from .validation import ValidationResult, validate_value

SUPPORTED_TYPES = (bool, int, float, str, list, dict)

# Names accepted in JSON schema definition files.
TYPE_ALIASES: Dict[str, type] = {
    "boolean": bool,
    "bool": bool,
    "integer": int,
    "int": int,
    "number": float,
    "float": float,
    "string": str,
    "str": str,
    "array": list,
    "list": list,
    "object": dict,
    "dict": dict,
}


@dataclass(frozen=True)
class FieldSchema:
    """Validation rule and default value for one configuration key."""

    type: type
    default: Any
    min: Optional[float] = None
    max: Optional[float] = None
    choices: Optional[Iterable[Any]] = None
    check: Optional[Callable[[Any], Optional[str]]] = field(default=None, compare=False)
    description: str = ""

    def __post_init__(self) -> None:
        if self.type not in SUPPORTED_TYPES:
            raise SchemaError(f"Unsupported field type: {self.type!r}")
        for bound_name in ("min", "max"):
            bound = getattr(self, bound_name)
            if bound is None:
                continue
            if (
                isinstance(bound, bool)
                or not isinstance(bound, (int, float))
                or math.isnan(bound)
            ):
                raise SchemaError(f"{bound_name} must be a number, got {bound!r}")
        if self.choices is not None:
            object.__setattr__(self, "choices", tuple(self.choices))
        result = validate_value(self.default, self)
        if not result.ok:
            raise SchemaError(
                f"Default value {self.default!r} is invalid: {result.error.message}"
            )

    def validate(self, raw: Any, key: str = "") -> ValidationResult:
        """Validate a raw value; ``key`` becomes the error path."""
        return validate_value(raw, self, key)


def boolean_field(default: Optional[bool] = False, description: str = "") -> FieldSchema:
    return FieldSchema(type=bool, default=default, description=description)


def string_field(
    default: Optional[str] = "",
    choices: Optional[Iterable[str]] = None,
    check: Optional[Callable[[Any], Optional[str]]] = None,
    description: str = "",
) -> FieldSchema:
    return FieldSchema(
        type=str, default=default, choices=choices, check=check, description=description
    )


def integer_field(
    default: Optional[int] = 0,
    min: Optional[int] = None,
    max: Optional[int] = None,
    description: str = "",
) -> FieldSchema:
    return FieldSchema(type=int, default=default, min=min, max=max, description=description)


def number_field(
    default: Optional[float] = 0.0,
    min: Optional[float] = None,
    max: Optional[float] = None,
    description: str = "",
) -> FieldSchema:
    return FieldSchema(
        type=float, default=default, min=min, max=max, description=description
    )


def enum_field(
    choices: Iterable[str], default: Optional[str] = None, description: str = ""
) -> FieldSchema:
    """String field restricted to ``choices``; defaults to the first choice."""
    choices = tuple(choices)
    if not choices:
        raise SchemaError("enum_field requires at least one choice")
    if default is None:
        default = choices[0]
    return FieldSchema(type=str, default=default, choices=choices, description=description)


def list_field(
    default: Optional[list] = None,
    choices: Optional[Iterable[Any]] = None,
    description: str = "",
) -> FieldSchema:
    return FieldSchema(
        type=list,
        default=[] if default is None else default,
        choices=choices,
        description=description,
    )


def dict_field(default: Optional[dict] = None, description: str = "") -> FieldSchema:
    return FieldSchema(
        type=dict, default={} if default is None else default, description=description
    )


def flatten(nested: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested dict to dotpath map."""
    items: Dict[str, Any] = {}
    for key, value in nested.items():
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict) and value:
            items.update(flatten(value, full_key))
        else:
            items[full_key] = value
    return items


def unflatten(dotmap: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert dotpath map to nested dict."""
    nested: Dict[str, Any] = {}
    for key, value in dotmap.items():
        parts = key.split(".")
        cursor = nested
        for part in parts[:-1]:
            if part not in cursor or not isinstance(cursor[part], dict):
                cursor[part] = {}
            cursor = cursor[part]
        cursor[parts[-1]] = value
    return nested


def _infer_type(value: Any) -> type:
    """Infer the field type of a default value."""
    if isinstance(value, bool):
        return bool
    if isinstance(value, int):
        return int
    if isinstance(value, float):
        return float
    if isinstance(value, (list, tuple)):
        return list
    if isinstance(value, dict):
        return dict
    # None defaults are treated as optional strings
    return str


class ConfigSchema(Mapping[str, FieldSchema]):
    """
    Immutable mapping from configuration key to its field declaration.

    Iteration follows declaration order, which is also the order in which
    keys are resolved and in which their errors are reported.
    """

    def __init__(self, fields: Optional[Mapping[str, FieldSchema]] = None):
        declared: Dict[str, FieldSchema] = {}
        for key, field_schema in (fields or {}).items():
            if not isinstance(key, str) or not key:
                raise SchemaError(f"Schema keys must be non-empty strings, got {key!r}")
            if not isinstance(field_schema, FieldSchema):
                raise SchemaError(
                    f"Schema entry {key!r} must be a FieldSchema, "
                    f"got {type(field_schema).__name__}"
                )
            declared[key] = field_schema
        self._fields = MappingProxyType(declared)

    def __getitem__(self, key: str) -> FieldSchema:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"ConfigSchema({list(self._fields)!r})"

    def defaults(self) -> Dict[str, Any]:
        return {key: copy.deepcopy(meta.default) for key, meta in self._fields.items()}

    @classmethod
    def from_defaults(cls, defaults: Dict[str, Any]) -> "ConfigSchema":
        """Build a schema from a (possibly nested) dict of default values."""
        dotmap = flatten(defaults)
        fields = {
            key: FieldSchema(
                type=_infer_type(value),
                default=list(value) if isinstance(value, tuple) else copy.deepcopy(value),
            )
            for key, value in dotmap.items()
        }
        return cls(fields)

    @classmethod
    def from_definitions(cls, definitions: Mapping[str, Any]) -> "ConfigSchema":
        """
        Build a schema from plain definitions, as found in a schema file.

        Each entry looks like ``{"type": "boolean", "default": false}`` with
        optional ``min``, ``max``, ``choices`` and ``description`` keys.

        Raises:
            SchemaError: If an entry is malformed or its default is invalid
        """
        fields: Dict[str, FieldSchema] = {}
        for key, definition in definitions.items():
            if not isinstance(definition, Mapping):
                raise SchemaError(f"Definition of {key!r} must be an object")
            type_label = definition.get("type")
            field_type = TYPE_ALIASES.get(str(type_label).lower()) if type_label else None
            if field_type is None:
                raise SchemaError(f"Definition of {key!r} has unknown type {type_label!r}")
            choices = definition.get("choices")
            if choices is not None and not isinstance(choices, list):
                raise SchemaError(f"Definition of {key!r} has non-list choices {choices!r}")
            try:
                fields[key] = FieldSchema(
                    type=field_type,
                    default=definition.get("default"),
                    min=definition.get("min"),
                    max=definition.get("max"),
                    choices=choices,
                    description=str(definition.get("description", "")),
                )
            except SchemaError as e:
                raise SchemaError(f"Invalid definition of {key!r}: {e.message}") from e
        return cls(fields)


def load_schema(path: Union[str, Path]) -> ConfigSchema:
    """Load a schema definitions file (JSON)."""
    schema_path = Path(path)
    try:
        payload = json.loads(schema_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SchemaError(f"Cannot read schema file {schema_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SchemaError(f"Invalid JSON in schema file {schema_path}: {e}") from e
    if not isinstance(payload, dict):
        raise SchemaError(f"Schema file {schema_path} must contain an object")
    return ConfigSchema.from_definitions(payload)
