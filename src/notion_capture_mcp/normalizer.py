"""Extract and repair the JSON object embedded in a raw AI response."""

from __future__ import annotations

import json
import logging

from .errors import InvalidJsonError, NoJsonFoundError
from .models.content import PAGE_CONTENT_KEY, StructuredContent, default_page_content

logger = logging.getLogger(__name__)


def extract_json_object(raw: str) -> str:
    """Return the span from the first ``{`` to the last ``}`` (inclusive).

    Raises:
        NoJsonFoundError: If either brace is missing or they are out of order.
    """
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise NoJsonFoundError()
    return raw[start : end + 1]


def normalize_response(raw: str | None) -> StructuredContent:
    """Parse a raw model response into StructuredContent.

    Tolerates prose and markdown fences around the object. A missing or
    non-object ``pageContent`` is replaced by the auto-generated default.

    Raises:
        NoJsonFoundError: No ``{...}`` span in *raw*.
        InvalidJsonError: The span does not parse as a JSON object.
    """
    span = extract_json_object(raw or "")
    try:
        parsed = json.loads(span)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse AI response (%d chars): %s", len(span), exc)
        raise InvalidJsonError() from exc
    if not isinstance(parsed, dict):
        raise InvalidJsonError()

    if not isinstance(parsed.get(PAGE_CONTENT_KEY), dict):
        logger.warning("AI response lacks pageContent, using auto-generated summary")
        parsed[PAGE_CONTENT_KEY] = default_page_content()
    return parsed
