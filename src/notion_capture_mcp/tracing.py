"""Optional MLflow tracing for capture tools and AI backend calls.

Tool entrypoints are wrapped by ``trace()`` and become ``TOOL`` root spans.
Each AI provider's SDK is autologged so generation calls nest under them as
``CHAT_MODEL`` spans. Spans from one capture session share a ``session_id``
tag (see ``tag_trace``).

Needs the ``tracing`` extra (``mlflow-tracing``); without it every helper
here is a no-op.

Env vars (all optional):
    MLFLOW_TRACKING_URI: Where to store traces. Empty = tracing disabled.
    MLFLOW_EXPERIMENT_NAME: Experiment name (default ``notion-capture-mcp``).
    CAPTURE_TRACING_ENABLED: Set to ``"false"`` to force-disable even with a URI.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

try:
    import mlflow

    _HAS_MLFLOW = True
except ImportError:
    _HAS_MLFLOW = False

# Provider → mlflow flavor whose autolog() patches that provider's SDK.
AUTOLOG_FLAVORS: dict[str, str] = {
    "gemini": "mlflow.gemini",
    "openrouter": "mlflow.openai",
}


def is_enabled() -> bool:
    """Return True when mlflow-tracing is installed and not explicitly disabled."""
    if not _HAS_MLFLOW:
        return False
    from .config import get_config

    return get_config().tracing_enabled


def trace(
    func: Callable | None = None,
    *,
    name: str | None = None,
    span_type: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable:
    """``@mlflow.trace`` when tracing is on, identity otherwise.

    Usage::

        @trace(name="capture_process", span_type="TOOL")
        async def capture_process(...): ...
    """
    if not is_enabled():
        return func if func is not None else (lambda f: f)
    return mlflow.trace(func, name=name, span_type=span_type, attributes=attributes)


def tag_trace(**tags: str) -> None:
    """Attach *tags* to the trace of the running tool call, if any."""
    if not is_enabled():
        return
    try:
        mlflow.update_current_trace(tags=tags)
    except Exception:
        logger.debug("Could not tag current trace", exc_info=True)


def _enable_autolog() -> list[str]:
    """Autolog every provider SDK whose flavor is importable. Returns providers enabled."""
    enabled = []
    for provider, module_name in AUTOLOG_FLAVORS.items():
        try:
            importlib.import_module(module_name).autolog()
        except Exception:
            logger.warning("Autolog for %s unavailable", provider, exc_info=True)
            continue
        enabled.append(provider)
    return enabled


def setup() -> None:
    """Point MLflow at the configured server and autolog the AI SDKs.

    Both providers are autologged, since ``infra_configure`` can switch
    between them at runtime. Failures are logged and swallowed.
    """
    if not is_enabled():
        return

    from .config import get_config

    cfg = get_config()
    try:
        mlflow.set_tracking_uri(cfg.mlflow_tracking_uri)
        mlflow.set_experiment(cfg.mlflow_experiment_name)
    except Exception:
        logger.warning("MLflow tracing setup failed, continuing without tracing", exc_info=True)
        return
    providers = _enable_autolog()
    logger.info(
        "MLflow tracing enabled (uri=%s, experiment=%s, autolog=%s)",
        cfg.mlflow_tracking_uri,
        cfg.mlflow_experiment_name,
        ", ".join(providers) or "none",
    )


def shutdown() -> None:
    """Flush pending async traces. No-op when tracing is disabled."""
    if not is_enabled():
        return

    try:
        mlflow.flush_trace_async_logging()
        logger.info("MLflow traces flushed")
    except Exception:
        logger.warning("MLflow trace flush failed", exc_info=True)
