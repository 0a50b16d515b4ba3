"""StructuredContent → Notion page ``properties`` payload.

Pure functions: the same content and schema always give the same payload.
Fields missing from the content (or set to ``None``) are left out entirely
so Notion keeps its own defaults for them.
"""

from __future__ import annotations

import math
from typing import Any, Callable

from ..models.content import StructuredContent
from ..models.schema import FieldKind, FieldSchema
from .blocks import rich_text

_FALSE_STRINGS = frozenset({"", "false", "no", "0", "off"})


def _coerce_number(value: Any) -> int | float | None:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if number.is_integer():
            return int(number)
    return number


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _title(value: Any) -> dict | None:
    return {"title": rich_text(str(value))} if value else None


def _rich_text(value: Any) -> dict | None:
    return {"rich_text": rich_text(str(value))} if value else None


def _url(value: Any) -> dict:
    return {"url": str(value) if value else None}


def _email(value: Any) -> dict | None:
    return {"email": str(value)} if value else None


def _phone(value: Any) -> dict | None:
    return {"phone_number": str(value)} if value else None


def _number(value: Any) -> dict | None:
    number = _coerce_number(value)
    return None if number is None else {"number": number}


def _checkbox(value: Any) -> dict:
    return {"checkbox": _coerce_bool(value)}


def _select(value: Any) -> dict | None:
    return {"select": {"name": str(value)}} if value else None


def _multi_select(value: Any) -> dict | None:
    if isinstance(value, list) and value:
        return {"multi_select": [{"name": str(item)} for item in value]}
    return None


def _date(value: Any) -> dict:
    if isinstance(value, str) and value:
        return {"date": {"start": value}}
    return {"date": None}


_BUILDERS: dict[FieldKind, Callable[[Any], dict | None]] = {
    FieldKind.SHORT_TEXT: _title,
    FieldKind.LONG_TEXT: _rich_text,
    FieldKind.URL: _url,
    FieldKind.EMAIL: _email,
    FieldKind.PHONE: _phone,
    FieldKind.NUMBER: _number,
    FieldKind.BOOLEAN: _checkbox,
    FieldKind.SINGLE_CHOICE: _select,
    FieldKind.MULTI_CHOICE: _multi_select,
    FieldKind.DATE: _date,
}


def build_property(field: FieldSchema, value: Any) -> dict | None:
    """Notion representation of one field value, or ``None`` to skip it."""
    if value is None:
        return None
    builder = _BUILDERS.get(field.kind)
    # Relations are never written.
    if builder is None:
        return None
    return builder(value)


def build_properties(content: StructuredContent, schema: dict[str, FieldSchema]) -> dict[str, Any]:
    """Build the ``properties`` object for ``POST /pages``."""
    properties: dict[str, Any] = {}
    for name, field in schema.items():
        prop = build_property(field, content.get(name))
        if prop is not None:
            properties[name] = prop
    return properties
