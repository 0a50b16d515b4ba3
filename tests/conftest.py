"""Shared test fixtures for notion-capture-mcp."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from notion_capture_mcp.models.schema import FieldKind, FieldSchema


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped.

    FastMCP 2.x wraps @server.tool functions in FunctionTool (not callable).
    FastMCP 3.x preserves the original function. This helper works with both.
    """
    return getattr(tool, "fn", tool)


@pytest.fixture(autouse=True, scope="session")
def _unwrap_fastmcp_tools():
    """Patch tool modules so FunctionTool objects become directly callable."""
    import importlib
    import pkgutil

    import notion_capture_mcp.tools as tools_pkg

    modules = [
        importlib.import_module(info.name)
        for info in pkgutil.walk_packages(tools_pkg.__path__, tools_pkg.__name__ + ".")
    ]
    for mod in modules:
        for name in list(vars(mod)):
            obj = getattr(mod, name, None)
            if obj is not None and hasattr(obj, "fn") and not callable(obj):
                setattr(mod, name, obj.fn)


@pytest.fixture(autouse=True)
def _set_dummy_api_keys(monkeypatch):
    """Ensure tests never hit real AI backends."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key-not-real")
    monkeypatch.setenv("OPENROUTER_API_KEY", "or-key-not-real")
    monkeypatch.delenv("CAPTURE_AI_PROVIDER", raising=False)
    monkeypatch.delenv("CAPTURE_MODEL", raising=False)
    monkeypatch.delenv("CAPTURE_UPLOAD_URL", raising=False)
    monkeypatch.delenv("NOTION_API_KEY", raising=False)
    monkeypatch.delenv("NOTION_DATABASE_ID", raising=False)


@pytest.fixture(autouse=True)
def _disable_tracing(monkeypatch):
    """Disable MLflow tracing in all tests to avoid real tracking-server calls."""
    monkeypatch.setenv("CAPTURE_TRACING_ENABLED", "false")


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/notion-capture-mcp/.env."""
    monkeypatch.setattr(
        "notion_capture_mcp.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture(autouse=True)
def clean_config():
    """Reset the config singleton between tests."""
    import notion_capture_mcp.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture()
def mock_backend():
    """An AIBackend stand-in whose ``send_generation`` is an AsyncMock."""
    backend = MagicMock()
    backend.provider = "gemini"
    backend.model = "gemini-2.5-flash"
    backend.send_generation = AsyncMock()
    return backend


@pytest.fixture()
def sample_schema() -> dict[str, FieldSchema]:
    """Schema covering every field kind."""
    fields = [
        FieldSchema(name="Title", kind=FieldKind.SHORT_TEXT),
        FieldSchema(name="Notes", kind=FieldKind.LONG_TEXT),
        FieldSchema(name="Link", kind=FieldKind.URL),
        FieldSchema(name="Email", kind=FieldKind.EMAIL),
        FieldSchema(name="Phone", kind=FieldKind.PHONE),
        FieldSchema(name="Created Date", kind=FieldKind.DATE),
        FieldSchema(name="Due", kind=FieldKind.DATE),
        FieldSchema(name="Event Date", kind=FieldKind.DATE),
        FieldSchema(name="Score", kind=FieldKind.NUMBER),
        FieldSchema(name="Done", kind=FieldKind.BOOLEAN),
        FieldSchema(name="Status", kind=FieldKind.SINGLE_CHOICE, options=("Todo", "Doing", "Done")),
        FieldSchema(name="Tags", kind=FieldKind.MULTI_CHOICE, options=("work", "home")),
        FieldSchema(name="Project", kind=FieldKind.RELATION),
    ]
    return {f.name: f for f in fields}


@pytest.fixture()
def page_content() -> dict[str, Any]:
    return {
        "summaryTitle": "Weekly sync",
        "summaryBody": "We agreed on the launch plan.",
        "takeaways": ["Ship on Friday", "Write release notes"],
    }
