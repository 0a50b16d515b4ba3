"""AI backends and the provider → backend factory."""

from __future__ import annotations

from ..config import ServerConfig, get_config
from .base import AIBackend, GenerationRequest
from .gemini import GeminiBackend
from .openrouter import OpenRouterBackend

BACKENDS: dict[str, type[AIBackend]] = {
    GeminiBackend.provider: GeminiBackend,
    OpenRouterBackend.provider: OpenRouterBackend,
}


def get_backend(cfg: ServerConfig | None = None) -> AIBackend:
    """Build the backend selected by ``cfg.ai_provider``."""
    cfg = cfg or get_config()
    backend_cls = BACKENDS[cfg.ai_provider]
    return backend_cls(api_key=cfg.ai_api_key, model=cfg.resolved_model)


async def close_all() -> int:
    """Close every pooled SDK client across backends."""
    return await GeminiBackend.close_all() + await OpenRouterBackend.close_all()


__all__ = [
    "AIBackend",
    "BACKENDS",
    "GeminiBackend",
    "GenerationRequest",
    "OpenRouterBackend",
    "close_all",
    "get_backend",
]
