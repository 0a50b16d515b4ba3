"""Sentinel resolution for normalized AI output.

The model is told to answer ``"NOW"`` for creation-time date fields; the
host substitutes a real date here.
"""

from __future__ import annotations

from datetime import date

from .models.content import StructuredContent
from .models.schema import FieldKind, FieldSchema

SENTINEL_NOW = "NOW"


def today_iso(today: date | None = None) -> str:
    """Current local date as ``YYYY-MM-DD``."""
    return (today or date.today()).isoformat()


def resolve_sentinels(
    content: StructuredContent,
    schema: dict[str, FieldSchema],
    *,
    previous: StructuredContent | None = None,
    today: date | None = None,
) -> StructuredContent:
    """Replace ``"NOW"`` in date fields and return a new dict.

    Initial processing (``previous`` is None) substitutes today's date.
    Refinement keeps the field's pre-refinement value when it has one,
    else today's date. Non-date fields pass through untouched.
    """
    resolved = dict(content)
    for name, value in content.items():
        field = schema.get(name)
        if field is None or field.kind is not FieldKind.DATE or value != SENTINEL_NOW:
            continue
        prior = previous.get(name) if previous is not None else None
        resolved[name] = prior if prior else today_iso(today)
    return resolved
