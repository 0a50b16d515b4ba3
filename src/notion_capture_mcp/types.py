"""Shared type aliases and helpers for tool parameters."""

from __future__ import annotations

import json
from typing import Annotated, Literal

from pydantic import Field


def coerce_json_param(value: str | dict | list | None, expected_type: type) -> dict | list | None:
    """Parse MCP JSON-RPC string params back to dict/list.

    MCP clients may send dict/list params as JSON strings; pydantic v2
    rejects those, so tools that accept objects coerce them here first.

    Returns:
        Parsed value if coercion succeeded, original value otherwise.
    """
    if not isinstance(value, str):
        return value
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return value
    if isinstance(parsed, expected_type):
        return parsed
    return value


# ── Literal enums ────────────────────────────────────────────────────────────

AiProvider = Literal["gemini", "openrouter"]
ConnectionAction = Literal["list", "activate", "remove"]

# ── Annotated aliases ────────────────────────────────────────────────────────

SessionId = Annotated[str, Field(min_length=1, description="Capture session ID from capture_start")]
ConnectionId = Annotated[str, Field(min_length=1, description="Connection ID from notion_connect")]
FilePaths = Annotated[list[str], Field(
    min_length=1,
    description="Local file paths (txt, md, png, jpg, pdf, docx, xlsx, pptx)",
)]
RefineInstruction = Annotated[str, Field(
    min_length=1,
    max_length=4000,
    description='Natural-language edit, e.g. "make the summary shorter"',
)]
