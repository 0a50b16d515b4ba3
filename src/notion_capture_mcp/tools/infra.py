"""Infrastructure tools — 1 tool on a FastMCP sub-server."""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..config import AI_PROVIDERS, get_config, update_config
from ..errors import make_tool_error
from ..tracing import trace
from ..types import AiProvider

infra_server = FastMCP("infra")
_SENSITIVE_CONFIG_FIELDS = {
    "gemini_api_key",
    "openrouter_api_key",
    "notion_api_key",
}


def _redacted_config() -> dict:
    """Return runtime config with secret-bearing fields removed."""
    cfg = get_config()
    data = cfg.model_dump(exclude=_SENSITIVE_CONFIG_FIELDS)
    data["resolved_model"] = cfg.resolved_model
    data["ai_api_key_set"] = bool(cfg.ai_api_key)
    return data


@infra_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
@trace(name="infra_configure", span_type="TOOL")
async def infra_configure(
    provider: AiProvider | None = None,
    model: Annotated[str | None, Field(description="Model ID for the selected provider")] = None,
    system_prompt: Annotated[str | None, Field(
        description="Default instruction prompt (empty string restores the built-in prompt)",
    )] = None,
) -> dict:
    """Reconfigure the AI backend at runtime — provider, model, or default prompt.

    Switching provider without a model selects that provider's first model.
    Changes take effect immediately for all subsequent calls.

    Args:
        provider: "gemini" or "openrouter".
        model: Model ID; any ID the provider accepts.
        system_prompt: Default prompt used when the connection has no override.

    Returns:
        Dict with current_config and the available provider/model catalogue.
    """
    try:
        overrides: dict[str, object] = {}
        if provider is not None:
            overrides["ai_provider"] = provider
        if model is not None:
            overrides["model"] = model
        if system_prompt is not None:
            overrides["system_prompt"] = system_prompt

        if overrides:
            update_config(**overrides)

        return {
            "current_config": _redacted_config(),
            "available_providers": AI_PROVIDERS,
        }
    except Exception as exc:
        return make_tool_error(exc)
