"""Processing and refinement through one shared path.

Both entry points build a generation schema, call the selected backend,
then run the raw reply through ``normalize_response`` and
``resolve_sentinels``. Nothing here mutates the caller's content; a failure
anywhere leaves the previous StructuredContent untouched.
"""

from __future__ import annotations

import json
import logging
from datetime import date

from .backends import AIBackend, GenerationRequest, get_backend
from .backends.base import GenerationMode
from .config import ServerConfig, get_config
from .errors import ValidationError
from .models.content import StructuredContent
from .models.inputs import InputBundle, TargetConnection
from .models.schema import FieldSchema
from .normalizer import normalize_response
from .prompts.capture import DEFAULT_SYSTEM_PROMPT, REFINE_PROMPT
from .schema_adapter import build_generation_schema
from .sentinels import resolve_sentinels

logger = logging.getLogger(__name__)


def resolve_prompt(connection: TargetConnection | None, cfg: ServerConfig | None = None) -> str:
    """Connection override, then configured prompt, then the built-in default."""
    if connection is not None and connection.system_prompt:
        return connection.system_prompt
    cfg = cfg or get_config()
    return cfg.system_prompt or DEFAULT_SYSTEM_PROMPT


async def _generate(
    prompt: str,
    bundle: InputBundle,
    schema: dict[str, FieldSchema],
    *,
    mode: GenerationMode,
    backend: AIBackend | None,
    previous: StructuredContent | None,
    today: date | None,
) -> StructuredContent:
    backend = backend or get_backend()
    request = GenerationRequest(
        prompt=prompt,
        schema=build_generation_schema(schema),
        text=bundle.text,
        files=list(bundle.files),
        mode=mode,
    )
    logger.debug(
        "%s via %s/%s: %d chars, %d file(s)",
        mode, backend.provider, backend.model, len(bundle.text), len(bundle.files),
    )
    raw = await backend.send_generation(request)
    normalized = normalize_response(raw)
    return resolve_sentinels(normalized, schema, previous=previous, today=today)


async def process_content(
    bundle: InputBundle,
    schema: dict[str, FieldSchema],
    connection: TargetConnection | None = None,
    *,
    backend: AIBackend | None = None,
    today: date | None = None,
) -> StructuredContent:
    """Turn raw input into a fresh StructuredContent.

    Raises:
        ValidationError: No text and no files, or no schema to fill.
    """
    if bundle.is_empty:
        raise ValidationError("Provide some text or at least one file before processing.")
    if not schema:
        raise ValidationError("No database schema loaded. Connect a Notion database first.")
    return await _generate(
        resolve_prompt(connection),
        bundle,
        schema,
        mode="process",
        backend=backend,
        previous=None,
        today=today,
    )


async def refine_content(
    current: StructuredContent,
    instruction: str,
    bundle: InputBundle,
    schema: dict[str, FieldSchema],
    *,
    backend: AIBackend | None = None,
    today: date | None = None,
) -> StructuredContent:
    """Apply a natural-language *instruction* to *current* and return the result.

    Creation-date sentinels keep their pre-refinement value.
    """
    if not current:
        raise ValidationError("Nothing to refine yet. Process some content first.")
    if not instruction.strip():
        raise ValidationError("Enter a refinement instruction.")
    prompt = REFINE_PROMPT.format(
        instruction=instruction.strip(),
        current_json=json.dumps(current, indent=2, ensure_ascii=False),
    )
    return await _generate(
        prompt,
        bundle,
        schema,
        mode="refine",
        backend=backend,
        previous=current,
        today=today,
    )
