"""Validation utilities for configuration values."""

from __future__ import annotations

from dataclasses import dataclass
import json
import math
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Tuple

if TYPE_CHECKING:
    from .schema import FieldSchema

INVALID_TYPE = "invalid_type"
TOO_SMALL = "too_small"
TOO_BIG = "too_big"
INVALID_ENUM_VALUE = "invalid_enum_value"
CUSTOM = "custom"

TYPE_NAMES = {
    bool: "boolean",
    int: "integer",
    float: "number",
    str: "string",
    list: "array",
    dict: "object",
}


@dataclass(frozen=True)
class ValidationError:
    """One failed validation of one stored key."""

    code: str
    expected: str
    received: str
    message: str
    path: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationResult:
    value: Any = None
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def type_name(expected_type: type) -> str:
    return TYPE_NAMES.get(expected_type, expected_type.__name__)


def describe_value_type(value: Any, expected_type: Optional[type] = None) -> str:
    """Name the JSON type of a value, the way it is reported in errors."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        if expected_type is int and isinstance(value, float):
            return "float"
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _is_valid_type(value: Any, expected_type: type) -> bool:
    if expected_type is bool:
        return isinstance(value, bool)
    if expected_type is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if expected_type is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected_type is list:
        # JSON has no tuples; accept both sequence flavours
        return isinstance(value, (list, tuple))
    if expected_type is dict:
        return isinstance(value, dict)
    if expected_type is str:
        return isinstance(value, str)
    return isinstance(value, expected_type)


def _literal(value: Any) -> str:
    if isinstance(value, str):
        return f"'{value}'"
    return json.dumps(value, default=str)


def _enum_expected(choices: Iterable[Any]) -> str:
    return " | ".join(_literal(choice) for choice in choices)


def _failure(
    code: str, expected: str, received: str, message: str, key: str
) -> ValidationResult:
    path = (key,) if key else ()
    return ValidationResult(
        error=ValidationError(
            code=code,
            expected=expected,
            received=received,
            message=message,
            path=path,
        )
    )


def validate_value(value: Any, field: "FieldSchema", key: str = "") -> ValidationResult:
    """
    Validate a raw value against a field.

    Checks run in order (type, bounds, choices, custom check) and stop at
    the first failure, so a failing value yields exactly one error.

    Args:
        value: Raw value, typically as read from storage
        field: Field declaration to validate against
        key: Schema key, recorded as the error path

    Returns:
        ValidationResult carrying either the accepted value or the error
    """
    expected = type_name(field.type)

    if value is None:
        # Optional fields (default None) accept None
        if field.default is None:
            return ValidationResult(value=None)
        return _failure(
            INVALID_TYPE,
            expected,
            "null",
            f"Expected {expected}, received null",
            key,
        )

    if not _is_valid_type(value, field.type):
        received = describe_value_type(value, field.type)
        return _failure(
            INVALID_TYPE,
            expected,
            received,
            f"Expected {expected}, received {received}",
            key,
        )

    is_number = field.type in (int, float)
    if is_number and isinstance(value, float) and math.isnan(value):
        return _failure(
            INVALID_TYPE,
            expected,
            "nan",
            f"Expected {expected}, received nan",
            key,
        )
    if is_number and field.min is not None and value < field.min:
        return _failure(
            TOO_SMALL,
            f">= {_literal(field.min)}",
            _literal(value),
            f"Number must be greater than or equal to {_literal(field.min)}",
            key,
        )
    if is_number and field.max is not None and value > field.max:
        return _failure(
            TOO_BIG,
            f"<= {_literal(field.max)}",
            _literal(value),
            f"Number must be less than or equal to {_literal(field.max)}",
            key,
        )

    if field.choices is not None:
        choices = tuple(field.choices)
        if isinstance(value, (list, tuple)):
            invalid = [item for item in value if item not in choices]
            if invalid:
                received = ", ".join(_literal(item) for item in invalid)
                return _failure(
                    INVALID_ENUM_VALUE,
                    _enum_expected(choices),
                    received,
                    f"Invalid enum value. Expected {_enum_expected(choices)}, "
                    f"received {received}",
                    key,
                )
        elif value not in choices:
            return _failure(
                INVALID_ENUM_VALUE,
                _enum_expected(choices),
                _literal(value),
                f"Invalid enum value. Expected {_enum_expected(choices)}, "
                f"received {_literal(value)}",
                key,
            )

    if field.check is not None:
        message = field.check(value)
        if message:
            return _failure(
                CUSTOM,
                expected,
                describe_value_type(value, field.type),
                message,
                key,
            )

    return ValidationResult(value=value)


def format_config_errors(errors: Optional[Iterable[ValidationError]]) -> str:
    """Render errors as ``"<key>: <message>"`` lines."""
    if not errors:
        return ""
    lines: List[str] = []
    for error in errors:
        location = error.path[0] if error.path else "<root>"
        lines.append(f"{location}: {error.message}")
    return "\n".join(lines)
