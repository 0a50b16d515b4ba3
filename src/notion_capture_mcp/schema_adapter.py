"""Field schema → generation schema.

Builds the JSON Schema the AI backend must satisfy from the target
database's FieldSchema mapping. Relation fields are never emitted; the
``pageContent`` object is always appended and always required.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .models.content import PAGE_CONTENT_KEY
from .models.schema import FieldKind, FieldSchema
from .sentinels import SENTINEL_NOW

TEXT_KINDS = frozenset({
    FieldKind.SHORT_TEXT,
    FieldKind.LONG_TEXT,
    FieldKind.URL,
    FieldKind.EMAIL,
    FieldKind.PHONE,
})

BASE_GUIDANCE = (
    'This is a property of the Notion database named "{name}". '
    "Infer its value from the user's content based on the meaning of the field name."
)


@dataclass(frozen=True)
class DateFieldRule:
    """A keyword set and the guidance used when a date field's name matches it."""

    interpretation: str
    keywords: tuple[str, ...]
    guidance: str

    def matches(self, field_name: str) -> bool:
        lowered = field_name.lower()
        return any(keyword in lowered for keyword in self.keywords)


# Evaluated top to bottom; first match wins.
DATE_FIELD_RULES: tuple[DateFieldRule, ...] = (
    DateFieldRule(
        interpretation="creation",
        keywords=("created", "creation", "create date", "建立", "創建"),
        guidance=(
            'This is a creation-time field named "{name}". '
            f'Ignore the user\'s content and return exactly the special value "{SENTINEL_NOW}".'
        ),
    ),
    DateFieldRule(
        interpretation="deadline",
        keywords=("due", "deadline", "到期", "截止"),
        guidance=(
            'This is a due-date field named "{name}". '
            "Search the user's content carefully for a deadline or time limit "
            'and format it as "YYYY-MM-DD".'
        ),
    ),
)

DEFAULT_DATE_GUIDANCE = (
    BASE_GUIDANCE
    + ' Find the corresponding date in the content and format it as "YYYY-MM-DD". '
    "If no date is found, leave it empty."
)

PAGE_CONTENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "summaryTitle": {"type": "string"},
        "summaryBody": {"type": "string"},
        "takeaways": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["summaryTitle", "summaryBody", "takeaways"],
}


def match_date_rule(field_name: str) -> DateFieldRule | None:
    """Return the first DateFieldRule whose keywords occur in *field_name*."""
    for rule in DATE_FIELD_RULES:
        if rule.matches(field_name):
            return rule
    return None


def field_constraint(field: FieldSchema) -> dict[str, Any] | None:
    """Build the JSON Schema constraint for one field, or None to exclude it."""
    name = field.name
    base = BASE_GUIDANCE.format(name=name)

    if field.kind in TEXT_KINDS:
        return {"type": "string", "description": base}
    if field.kind is FieldKind.DATE:
        rule = match_date_rule(name)
        guidance = rule.guidance.format(name=name) if rule else DEFAULT_DATE_GUIDANCE.format(name=name)
        return {"type": "string", "description": guidance}
    if field.kind is FieldKind.NUMBER:
        return {"type": "number", "description": base}
    if field.kind is FieldKind.BOOLEAN:
        return {
            "type": "boolean",
            "description": f"{base} Decide from the content whether it should be true or false.",
        }
    if field.kind is FieldKind.SINGLE_CHOICE:
        return {"type": "string", "enum": list(field.options), "description": base}
    if field.kind is FieldKind.MULTI_CHOICE:
        return {
            "type": "array",
            "items": {"type": "string", "enum": list(field.options)},
            "description": base,
        }
    return None


def build_generation_schema(schema: dict[str, FieldSchema]) -> dict[str, Any]:
    """Convert a FieldSchema mapping into the generation schema.

    Every emitted field plus ``pageContent`` is listed in ``required``.

    Args:
        schema: Field name → FieldSchema, in database order.

    Returns:
        A JSON Schema object dict, fresh on every call.
    """
    properties: dict[str, Any] = {}
    required: list[str] = []
    for name, field in schema.items():
        if not field.ai_writable:
            continue
        constraint = field_constraint(field)
        if constraint is None:
            continue
        properties[name] = constraint
        required.append(name)

    properties[PAGE_CONTENT_KEY] = {
        **PAGE_CONTENT_SCHEMA,
        "properties": dict(PAGE_CONTENT_SCHEMA["properties"]),
        "required": list(PAGE_CONTENT_SCHEMA["required"]),
    }
    required.append(PAGE_CONTENT_KEY)
    return {"type": "object", "properties": properties, "required": required}
