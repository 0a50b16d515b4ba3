"""Gemini backend — multimodal parts plus a native response JSON schema."""

from __future__ import annotations

import logging

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..errors import ConfigurationError, TransportError
from ..files import FileKind, classify, decode_text, extract_office_text
from ..models.inputs import InputFile
from ..prompts.capture import (
    CAPTURE_SYSTEM,
    FILE_TEXT_NOTE,
    REFINE_CONTEXT_TEXT,
    REFINE_FILE_TEXT_NOTE,
    USER_TEXT,
)
from .base import AIBackend, GenerationMode, GenerationRequest

logger = logging.getLogger(__name__)

_OFFICE_KINDS = frozenset({FileKind.DOCX, FileKind.XLSX, FileKind.PPTX})


def file_to_part(file: InputFile, mode: GenerationMode = "process") -> types.Part:
    """Convert one attached file into a Gemini part.

    Images, PDFs and unknown kinds go as inline bytes; text is inlined;
    Office documents are reduced to their text.
    """
    kind = classify(file.mime_type)
    if kind is FileKind.TEXT:
        template = REFINE_FILE_TEXT_NOTE if mode == "refine" else FILE_TEXT_NOTE
        return types.Part(text=template.format(name=file.name, text=decode_text(file)))
    if kind in _OFFICE_KINDS:
        return types.Part(text=extract_office_text(file))
    return types.Part.from_bytes(data=file.data, mime_type=file.mime_type)


def build_parts(request: GenerationRequest) -> list[types.Part]:
    """Prompt first, then user text, then files in input order."""
    parts = [types.Part(text=request.prompt)]
    if request.text:
        template = REFINE_CONTEXT_TEXT if request.mode == "refine" else USER_TEXT
        parts.append(types.Part(text=template.format(text=request.text)))
    parts.extend(file_to_part(f, request.mode) for f in request.files)
    return parts


class GeminiBackend(AIBackend):
    """Gemini via google-genai, one shared client per API key."""

    provider = "gemini"
    _clients: dict[str, genai.Client] = {}

    @classmethod
    def client_for(cls, api_key: str) -> genai.Client:
        """Return (or create) the shared client for *api_key*."""
        if not api_key:
            raise ConfigurationError(
                "Gemini API key is missing. Set GEMINI_API_KEY or configure it with infra_configure."
            )
        if api_key not in cls._clients:
            cls._clients[api_key] = genai.Client(api_key=api_key)
            logger.info("Created Gemini client (key …%s)", api_key[-4:])
        return cls._clients[api_key]

    async def send_generation(self, request: GenerationRequest) -> str:
        client = self.client_for(self.api_key)
        config = types.GenerateContentConfig(
            system_instruction=CAPTURE_SYSTEM,
            response_mime_type="application/json",
            response_json_schema=request.schema,
        )
        contents = types.Content(role="user", parts=build_parts(request))
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as exc:
            raise TransportError(
                f"Gemini API Error: {exc.message or exc.status or exc.code}",
                status=exc.code,
                backend="Gemini",
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Gemini request failed: {exc}", backend="Gemini") from exc

        # Skip thinking parts
        parts = response.candidates[0].content.parts if response.candidates else []
        text_parts = [p.text for p in parts or [] if p.text and not getattr(p, "thought", False)]
        return "\n".join(text_parts) if text_parts else (response.text or "")

    @classmethod
    async def close_all(cls) -> int:
        """Shut down all shared clients. Returns count closed."""
        count = 0
        for client in list(cls._clients.values()):
            try:
                await client.aio.aclose()
            except Exception:
                logger.debug("Gemini client close failed", exc_info=True)
            count += 1
        cls._clients.clear()
        logger.info("Closed %d Gemini client(s)", count)
        return count
