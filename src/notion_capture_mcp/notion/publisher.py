"""Assemble a page from StructuredContent and create it in Notion."""

from __future__ import annotations

import logging

from pydantic import BaseModel

from ..models.content import StructuredContent
from ..models.inputs import InputBundle, TargetConnection
from ..models.schema import FieldSchema
from .blocks import build_page_blocks
from .client import create_page
from .properties import build_properties

logger = logging.getLogger(__name__)


class PublishResult(BaseModel):
    page_id: str
    url: str
    app_url: str
    message: str


def app_url(url: str) -> str:
    """Rewrite a web page URL to the ``notion://`` desktop-app scheme."""
    return url.replace("https://www.", "notion://")


async def publish(
    connection: TargetConnection,
    content: StructuredContent,
    schema: dict[str, FieldSchema],
    bundle: InputBundle,
) -> PublishResult:
    """Create exactly one page. Not idempotent: a retry may duplicate it."""
    properties = build_properties(content, schema)
    children = build_page_blocks(content, bundle.text, bundle.files)
    page = await create_page(connection.api_key, connection.database_id, properties, children)
    url = page.get("url", "")
    link = app_url(url)
    return PublishResult(
        page_id=page.get("id", ""),
        url=url,
        app_url=link,
        message=f"Page created! View it here: {link}",
    )
