"""Target-database field descriptions.

``FieldSchema`` is the host-side view of one Notion database property.
``parse_database_schema`` turns the ``properties`` mapping returned by
``GET /databases/{id}`` into an ordered ``{name: FieldSchema}`` dict.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class FieldKind(str, Enum):
    """Kinds of target-document fields the pipeline understands."""

    SHORT_TEXT = "short-text"
    LONG_TEXT = "long-text"
    URL = "url"
    EMAIL = "email"
    PHONE = "phone"
    DATE = "date"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SINGLE_CHOICE = "single-choice"
    MULTI_CHOICE = "multi-choice"
    RELATION = "relation"


# Notion property type → FieldKind. The database title is the short-text field.
NOTION_TYPE_TO_KIND: dict[str, FieldKind] = {
    "title": FieldKind.SHORT_TEXT,
    "rich_text": FieldKind.LONG_TEXT,
    "url": FieldKind.URL,
    "email": FieldKind.EMAIL,
    "phone_number": FieldKind.PHONE,
    "date": FieldKind.DATE,
    "number": FieldKind.NUMBER,
    "checkbox": FieldKind.BOOLEAN,
    "select": FieldKind.SINGLE_CHOICE,
    "multi_select": FieldKind.MULTI_CHOICE,
    "relation": FieldKind.RELATION,
}

CHOICE_KINDS = frozenset({FieldKind.SINGLE_CHOICE, FieldKind.MULTI_CHOICE})


class FieldSchema(BaseModel):
    """One field of the target document. Immutable once fetched."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: FieldKind
    options: tuple[str, ...] = Field(
        default=(),
        description="Allowed option labels, in database order (choice kinds only)",
    )

    @property
    def ai_writable(self) -> bool:
        """Relations are never produced by the model."""
        return self.kind is not FieldKind.RELATION


def _option_labels(details: dict[str, Any], notion_type: str) -> tuple[str, ...]:
    body = details.get(notion_type) or {}
    return tuple(opt.get("name", "") for opt in body.get("options", []) if opt.get("name"))


def parse_database_schema(properties: dict[str, dict[str, Any]]) -> dict[str, FieldSchema]:
    """Convert a Notion ``properties`` mapping into FieldSchema entries.

    Property types without a FieldKind (formula, rollup, people, files, ...)
    are dropped: the pipeline can neither prompt for nor write them.
    """
    schema: dict[str, FieldSchema] = {}
    for name, details in properties.items():
        notion_type = details.get("type", "")
        kind = NOTION_TYPE_TO_KIND.get(notion_type)
        if kind is None:
            logger.debug("Skipping unsupported property %r (type=%s)", name, notion_type)
            continue
        options = _option_labels(details, notion_type) if kind in CHOICE_KINDS else ()
        schema[name] = FieldSchema(name=name, kind=kind, options=options)
    return schema
