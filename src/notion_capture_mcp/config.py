"""Server configuration via environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

VALID_PROVIDERS = {"gemini", "openrouter"}

# Every variable ServerConfig.from_env reads; only these are taken from the env file.
ENV_KEYS = (
    "CAPTURE_AI_PROVIDER",
    "GEMINI_API_KEY",
    "OPENROUTER_API_KEY",
    "CAPTURE_MODEL",
    "CAPTURE_SYSTEM_PROMPT",
    "OPENROUTER_BASE_URL",
    "NOTION_API_BASE",
    "NOTION_VERSION",
    "NOTION_API_KEY",
    "NOTION_DATABASE_ID",
    "CAPTURE_UPLOAD_URL",
    "CAPTURE_HTTP_TIMEOUT",
    "CAPTURE_MAX_SESSIONS",
    "CAPTURE_SESSION_TIMEOUT_HOURS",
    "CAPTURE_TRACING_ENABLED",
    "MLFLOW_TRACKING_URI",
    "MLFLOW_EXPERIMENT_NAME",
)

AI_PROVIDERS: dict[str, dict[str, object]] = {
    "gemini": {
        "name": "Google Gemini",
        "models": ["gemini-2.5-flash", "gemini-2.5-flash-lite", "gemini-2.5-pro"],
    },
    "openrouter": {
        "name": "OpenRouter",
        "models": [
            "openai/gpt-oss-20b:free",
            "z-ai/glm-4.5-air:free",
            "deepseek/deepseek-chat-v3-0324:free",
            "deepseek/deepseek-r1-0528:free",
            "deepseek/deepseek-r1:free",
            "moonshotai/kimi-vl-a3b-thinking:free",
        ],
    },
}


def default_model_for(provider: str) -> str:
    """Return the first catalogued model for *provider*."""
    return AI_PROVIDERS[provider]["models"][0]  # type: ignore[index]


def _resolve_tracing_enabled(flag_value: str, tracking_uri: str) -> bool:
    """Derive tracing_enabled from env vars.

    - ``CAPTURE_TRACING_ENABLED=false`` → always disabled (explicit opt-out).
    - Otherwise enabled when ``MLFLOW_TRACKING_URI`` is non-empty.
    """
    if flag_value.lower() == "false":
        return False
    return bool(tracking_uri)


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment."""

    ai_provider: str = Field(default="gemini")
    gemini_api_key: str = Field(default="")
    openrouter_api_key: str = Field(default="")
    model: str = Field(default="")
    system_prompt: str = Field(default="")
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1")
    notion_api_base: str = Field(default="https://api.notion.com/v1")
    notion_version: str = Field(default="2022-06-28")
    notion_api_key: str = Field(default="")
    notion_database_id: str = Field(default="")
    upload_url: str = Field(default="")
    http_timeout: float = Field(default=60.0)
    max_sessions: int = Field(default=20)
    session_timeout_hours: int = Field(default=6)
    tracing_enabled: bool = Field(default=False)
    mlflow_tracking_uri: str = Field(default="")
    mlflow_experiment_name: str = Field(default="notion-capture-mcp")

    @field_validator("ai_provider")
    @classmethod
    def validate_provider(cls, value: str) -> str:
        provider = value.strip().lower()
        if provider not in VALID_PROVIDERS:
            allowed = ", ".join(sorted(VALID_PROVIDERS))
            raise ValueError(f"Invalid AI provider '{value}'. Allowed: {allowed}")
        return provider

    @field_validator("max_sessions", "session_timeout_hours")
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Configuration values must be >= 1")
        return value

    @field_validator("http_timeout")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("http_timeout must be > 0")
        return value

    @property
    def resolved_model(self) -> str:
        """Configured model, or the provider's first catalogued model."""
        return self.model or default_model_for(self.ai_provider)

    @property
    def ai_api_key(self) -> str:
        """API key for the currently selected provider."""
        if self.ai_provider == "gemini":
            return self.gemini_api_key
        return self.openrouter_api_key

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables."""
        return cls(
            ai_provider=os.getenv("CAPTURE_AI_PROVIDER", "gemini"),
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY", ""),
            model=os.getenv("CAPTURE_MODEL", ""),
            system_prompt=os.getenv("CAPTURE_SYSTEM_PROMPT", ""),
            openrouter_base_url=os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"),
            notion_api_base=os.getenv("NOTION_API_BASE", "https://api.notion.com/v1").rstrip("/"),
            notion_version=os.getenv("NOTION_VERSION", "2022-06-28"),
            notion_api_key=os.getenv("NOTION_API_KEY", ""),
            notion_database_id=os.getenv("NOTION_DATABASE_ID", ""),
            upload_url=os.getenv("CAPTURE_UPLOAD_URL", ""),
            http_timeout=float(os.getenv("CAPTURE_HTTP_TIMEOUT", "60")),
            max_sessions=int(os.getenv("CAPTURE_MAX_SESSIONS", "20")),
            session_timeout_hours=int(os.getenv("CAPTURE_SESSION_TIMEOUT_HOURS", "6")),
            tracing_enabled=_resolve_tracing_enabled(
                os.getenv("CAPTURE_TRACING_ENABLED", ""),
                os.getenv("MLFLOW_TRACKING_URI", ""),
            ),
            mlflow_tracking_uri=os.getenv("MLFLOW_TRACKING_URI", ""),
            mlflow_experiment_name=os.getenv("MLFLOW_EXPERIMENT_NAME", "notion-capture-mcp"),
        )


_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the global config singleton, creating it on first access.

    Loads ``~/.config/notion-capture-mcp/.env`` before reading env vars.
    Process environment always takes precedence over the config file.
    """
    global _config
    if _config is None:
        import logging

        from .dotenv import load_env_file

        injected = load_env_file(ENV_KEYS)
        if injected:
            logger = logging.getLogger(__name__)
            logger.info(
                "Loaded %d var(s) from config: %s",
                len(injected),
                ", ".join(injected.keys()),
            )
        _config = ServerConfig.from_env()
    return _config


def update_config(**overrides: object) -> ServerConfig:
    """Patch the live config (used by the ``infra_configure`` tool).

    Switching ``ai_provider`` without an explicit ``model`` resets the model
    to the new provider's default.
    """
    global _config
    cfg = get_config()
    data = cfg.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    if overrides.get("ai_provider") is not None and overrides.get("model") is None:
        data["model"] = ""
    _config = ServerConfig(**data)
    return _config
