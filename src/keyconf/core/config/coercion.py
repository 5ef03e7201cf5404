"""Coercion of textual input (CLI arguments) to a field's type."""

from __future__ import annotations

import json
from typing import Any

from .schema import FieldSchema


def _coerce_bool(value: str) -> Any:
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return value


def _coerce_int(value: str) -> Any:
    try:
        return int(value.strip())
    except ValueError:
        return value


def _coerce_float(value: str) -> Any:
    try:
        return float(value.strip())
    except ValueError:
        return value


def _coerce_list(value: str) -> Any:
    trimmed = value.strip()
    try:
        parsed = json.loads(trimmed)
        if isinstance(parsed, list):
            return parsed
    except json.JSONDecodeError:
        pass
    if trimmed:
        return [item.strip() for item in trimmed.split(",") if item.strip()]
    return []


def _coerce_dict(value: str) -> Any:
    try:
        parsed = json.loads(value.strip())
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass
    return value


def coerce(raw: Any, field_meta: FieldSchema) -> Any:
    """
    Coerce raw text to the field's type where possible.

    Values that cannot be coerced are returned unchanged so that validation
    reports them with their original type.
    """
    if not isinstance(raw, str):
        return raw
    target = field_meta.type
    if target is bool:
        return _coerce_bool(raw)
    if target is int:
        return _coerce_int(raw)
    if target is float:
        return _coerce_float(raw)
    if target is list:
        return _coerce_list(raw)
    if target is dict:
        return _coerce_dict(raw)
    return raw
