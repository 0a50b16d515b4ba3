"""Main FastMCP server — mounts all sub-servers."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from . import backends, tracing
from .connections import connection_registry
from .sessions import session_store
from .tools.capture import capture_server
from .tools.infra import infra_server
from .tools.notion import notion_server

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook — seeds the env connection, tears down clients."""
    tracing.setup()
    seeded = connection_registry.seed_from_env()
    if seeded is not None:
        logger.info("Using Notion database %s from environment", seeded.database_id)
    yield {}
    cleared = session_store.clear()
    closed = await backends.close_all()
    tracing.shutdown()
    logger.info("Lifespan shutdown: dropped %d session(s), closed %d client(s)", cleared, closed)


app = FastMCP(
    "notion-capture",
    instructions=(
        "Capture notes, documents and images into a Notion database. "
        "Connect a database, start a capture session, add text and files, "
        "process with Gemini or OpenRouter, refine, then publish a page."
    ),
    lifespan=_lifespan,
)

app.mount(notion_server)
app.mount(capture_server)
app.mount(infra_server)


def main() -> None:
    """Entry-point for ``notion-capture-mcp`` console script."""
    app.run()


if __name__ == "__main__":
    main()
