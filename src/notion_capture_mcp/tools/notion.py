"""Notion connection tools — 3 tools on a FastMCP sub-server."""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..connections import connection_registry
from ..errors import make_tool_error
from ..models.schema import FieldSchema
from ..notion.client import fetch_schema
from ..tracing import trace
from ..types import ConnectionAction, ConnectionId

logger = logging.getLogger(__name__)

notion_server = FastMCP("notion")


def _schema_view(schema: dict[str, FieldSchema]) -> list[dict]:
    return [
        {
            "name": f.name,
            "kind": f.kind.value,
            "options": list(f.options),
            "ai_writable": f.ai_writable,
        }
        for f in schema.values()
    ]


def _connections_view() -> dict:
    active_id = connection_registry.active_id
    return {
        "active_id": active_id,
        "connections": [
            {**c.redacted(), "active": c.id == active_id}
            for c in connection_registry.list()
        ],
    }


async def load_schema(connection_id: str, *, refresh: bool = False) -> dict[str, FieldSchema]:
    """Return the cached schema for a connection, fetching it when needed."""
    schema = None if refresh else connection_registry.schema(connection_id)
    if schema is None:
        connection = connection_registry.get(connection_id)
        schema = await fetch_schema(connection.api_key, connection.database_id)
        connection_registry.set_schema(connection_id, schema)
    return schema


@notion_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="notion_connect", span_type="TOOL")
async def notion_connect(
    name: Annotated[str, Field(min_length=1, description="Friendly name for this database")],
    api_key: Annotated[str, Field(min_length=1, description="Notion integration secret")],
    database_id: Annotated[str, Field(min_length=1, description="Notion database ID")],
    system_prompt: Annotated[str | None, Field(
        description="Optional instruction prompt used instead of the default for this database",
    )] = None,
) -> dict:
    """Connect a Notion database, fetch its schema and make it active.

    The connection is only kept if the schema fetch succeeds.

    Args:
        name: Friendly name shown in listings.
        api_key: Notion integration secret with access to the database.
        database_id: ID of the target database.
        system_prompt: Per-database override of the instruction prompt.

    Returns:
        Dict with the redacted connection, its fields and a success message.
    """
    try:
        schema = await fetch_schema(api_key, database_id)
    except Exception as exc:
        return make_tool_error(exc)

    connection = connection_registry.add(name, api_key, database_id, system_prompt)
    connection_registry.set_schema(connection.id, schema)
    return {
        "connection": connection.redacted(),
        "fields": _schema_view(schema),
        "message": "Successfully connected to Notion database!",
    }


@notion_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=True,
        idempotentHint=False,
        openWorldHint=False,
    )
)
@trace(name="notion_connections", span_type="TOOL")
async def notion_connections(
    action: ConnectionAction = "list",
    connection_id: ConnectionId | None = None,
) -> dict:
    """List, activate or remove Notion connections.

    Removing the active connection activates the first remaining one.

    Args:
        action: "list", "activate", or "remove".
        connection_id: Required for "activate" and "remove".

    Returns:
        Dict with active_id and the redacted connection list.
    """
    try:
        if action != "list" and not connection_id:
            raise ValueError(f'connection_id is required for action "{action}"')
        if action == "activate":
            connection_registry.activate(connection_id)
        elif action == "remove":
            connection_registry.remove(connection_id)
        return _connections_view()
    except (ValueError, KeyError) as exc:
        return make_tool_error(exc)


@notion_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=True,
    )
)
@trace(name="notion_schema", span_type="TOOL")
async def notion_schema(
    connection_id: ConnectionId | None = None,
    refresh: Annotated[bool, Field(description="Re-fetch from Notion instead of using the cache")] = False,
) -> dict:
    """Show the fields of the active (or named) Notion database.

    Args:
        connection_id: Connection to inspect; defaults to the active one.
        refresh: Bypass the cached schema.

    Returns:
        Dict with connection_id, name and fields (name, kind, options, ai_writable).
    """
    try:
        connection = connection_registry.resolve(connection_id)
        schema = await load_schema(connection.id, refresh=refresh)
    except Exception as exc:
        return make_tool_error(exc)
    return {
        "connection_id": connection.id,
        "name": connection.name,
        "fields": _schema_view(schema),
    }
