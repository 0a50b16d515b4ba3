"""OpenRouter backend — OpenAI-compatible chat completions in JSON-object mode.

The schema is not enforced natively, so it is embedded in the prompt text.
Only images and text files reach the model; other files become a note
naming the file.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any

from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from ..config import get_config
from ..errors import ConfigurationError, TransportError
from ..files import FileKind, classify, decode_text
from ..models.inputs import InputFile
from ..prompts.capture import (
    FILE_OTHER_NOTE,
    FILE_TEXT_NOTE,
    REFINE_CONTEXT_TEXT,
    REFINE_FILE_OTHER_NOTE,
    REFINE_FILE_TEXT_NOTE,
    SCHEMA_SUFFIX,
    USER_TEXT,
)
from .base import AIBackend, GenerationMode, GenerationRequest

logger = logging.getLogger(__name__)


def data_url(file: InputFile) -> str:
    """Encode *file* as a ``data:`` URL."""
    encoded = base64.b64encode(file.data).decode("ascii")
    return f"data:{file.mime_type};base64,{encoded}"


def file_to_content(file: InputFile, mode: GenerationMode = "process") -> dict[str, Any]:
    """Convert one attached file into a chat content part."""
    kind = classify(file.mime_type)
    if kind is FileKind.IMAGE:
        return {"type": "image_url", "image_url": {"url": data_url(file)}}
    if kind is FileKind.TEXT:
        template = REFINE_FILE_TEXT_NOTE if mode == "refine" else FILE_TEXT_NOTE
        return {"type": "text", "text": template.format(name=file.name, text=decode_text(file))}
    template = REFINE_FILE_OTHER_NOTE if mode == "refine" else FILE_OTHER_NOTE
    return {"type": "text", "text": template.format(name=file.name, mime_type=file.mime_type)}


def build_content(request: GenerationRequest) -> list[dict[str, Any]]:
    """Prompt (with inline schema) first, then user text, then files in order."""
    schema_json = json.dumps(request.schema, ensure_ascii=False)
    content: list[dict[str, Any]] = [
        {"type": "text", "text": request.prompt + SCHEMA_SUFFIX.format(schema_json=schema_json)}
    ]
    if request.text:
        template = REFINE_CONTEXT_TEXT if request.mode == "refine" else USER_TEXT
        content.append({"type": "text", "text": template.format(text=request.text)})
    content.extend(file_to_content(f, request.mode) for f in request.files)
    return content


class OpenRouterBackend(AIBackend):
    """OpenRouter through the OpenAI SDK, one shared client per API key."""

    provider = "openrouter"
    _clients: dict[str, AsyncOpenAI] = {}

    @classmethod
    def client_for(cls, api_key: str) -> AsyncOpenAI:
        """Return (or create) the shared client for *api_key*."""
        if not api_key:
            raise ConfigurationError(
                "OpenRouter API key is missing. Set OPENROUTER_API_KEY or configure it with infra_configure."
            )
        if api_key not in cls._clients:
            cfg = get_config()
            cls._clients[api_key] = AsyncOpenAI(
                api_key=api_key,
                base_url=cfg.openrouter_base_url,
                timeout=cfg.http_timeout,
                max_retries=0,
            )
            logger.info("Created OpenRouter client (key …%s)", api_key[-4:])
        return cls._clients[api_key]

    async def send_generation(self, request: GenerationRequest) -> str:
        client = self.client_for(self.api_key)
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": build_content(request)}],
                response_format={"type": "json_object"},
            )
        except APIStatusError as exc:
            raise TransportError(
                f"OpenRouter API Error: {_error_message(exc)}",
                status=exc.status_code,
                backend="OpenRouter",
            ) from exc
        except APIConnectionError as exc:
            raise TransportError(f"OpenRouter request failed: {exc}", backend="OpenRouter") from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    @classmethod
    async def close_all(cls) -> int:
        """Shut down all shared clients. Returns count closed."""
        count = 0
        for client in list(cls._clients.values()):
            await client.close()
            count += 1
        cls._clients.clear()
        logger.info("Closed %d OpenRouter client(s)", count)
        return count


def _error_message(exc: APIStatusError) -> str:
    """Prefer ``error.message`` from the response body, else the SDK message."""
    body = exc.body
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return exc.message
