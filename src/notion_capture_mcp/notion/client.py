"""Thin async Notion REST client — schema read, page create, block append.

Every call goes through ``_request`` which sends the bearer key and the
pinned ``Notion-Version`` header and turns any failure into a
``TransportError`` whose message is safe to show the user.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..config import get_config
from ..errors import ConfigurationError, TransportError
from ..models.schema import FieldSchema, parse_database_schema

logger = logging.getLogger(__name__)

MAX_CHILDREN_PER_REQUEST = 100
_DETAIL_LIMIT = 150


def _headers(api_key: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Notion-Version": get_config().notion_version,
        "Content-Type": "application/json",
    }


def _require_credentials(api_key: str, database_id: str) -> None:
    if not api_key or not database_id:
        raise ConfigurationError("Please provide a Notion API Key and Database ID.")


def parse_notion_response(response: httpx.Response) -> dict[str, Any]:
    """Decode a Notion response, raising ``TransportError`` on any failure.

    A body that is not JSON usually means a proxy or gateway answered
    instead of Notion; the first 150 characters are kept for diagnosis.
    """
    text = response.text
    try:
        data = json.loads(text)
    except ValueError:
        detail = f"{text[:_DETAIL_LIMIT]}..." if len(text) > _DETAIL_LIMIT else text
        raise TransportError(
            "Could not connect to Notion. The server sent an invalid response. "
            f"Status: {response.status_code}. Details: {detail}",
            status=response.status_code,
            backend="Notion",
        ) from None
    if not response.is_success:
        message = data.get("message") if isinstance(data, dict) else None
        if message:
            raise TransportError(
                f"Notion API Error: {message}", status=response.status_code, backend="Notion"
            )
        raise TransportError(
            f"Notion API Error: Received status {response.status_code}",
            status=response.status_code,
            backend="Notion",
        )
    return data


async def _request(
    method: str,
    path: str,
    api_key: str,
    payload: dict[str, Any] | None = None,
) -> dict[str, Any]:
    cfg = get_config()
    url = f"{cfg.notion_api_base}{path}"
    try:
        async with httpx.AsyncClient(timeout=cfg.http_timeout) as client:
            response = await client.request(method, url, headers=_headers(api_key), json=payload)
    except httpx.HTTPError as exc:
        raise TransportError(f"Could not reach Notion: {exc}", backend="Notion") from exc
    return parse_notion_response(response)


async def fetch_database(api_key: str, database_id: str) -> dict[str, Any]:
    """GET the raw database object."""
    _require_credentials(api_key, database_id)
    return await _request("GET", f"/databases/{database_id}", api_key)


async def fetch_schema(api_key: str, database_id: str) -> dict[str, FieldSchema]:
    """Fetch and parse the database's property definitions."""
    data = await fetch_database(api_key, database_id)
    schema = parse_database_schema(data.get("properties") or {})
    logger.info("Fetched schema for database %s (%d fields)", database_id, len(schema))
    return schema


async def append_children(api_key: str, block_id: str, children: list[dict[str, Any]]) -> None:
    """Append *children* under *block_id* in batches Notion accepts."""
    for start in range(0, len(children), MAX_CHILDREN_PER_REQUEST):
        batch = children[start:start + MAX_CHILDREN_PER_REQUEST]
        await _request("PATCH", f"/blocks/{block_id}/children", api_key, {"children": batch})


async def create_page(
    api_key: str,
    database_id: str,
    properties: dict[str, Any],
    children: list[dict[str, Any]],
) -> dict[str, Any]:
    """Create one page in *database_id* and return Notion's page object.

    Notion caps a create request at 100 child blocks; the remainder is
    appended to the new page afterwards.
    """
    _require_credentials(api_key, database_id)
    first, rest = children[:MAX_CHILDREN_PER_REQUEST], children[MAX_CHILDREN_PER_REQUEST:]
    payload = {
        "parent": {"database_id": database_id},
        "properties": properties,
        "children": first,
    }
    logger.debug("Creating page: %d properties, %d blocks", len(properties), len(children))
    page = await _request("POST", "/pages", api_key, payload)
    if rest:
        await append_children(api_key, page["id"], rest)
    logger.info("Created Notion page %s", page.get("id", ""))
    return page
