"""Structured content models.

StructuredContent travels as a plain ``dict`` (field name → value) so user
edits and AI output share one shape; only the nested ``pageContent`` object
has a typed model.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

PAGE_CONTENT_KEY = "pageContent"
AUTO_SUMMARY_TITLE = "Summary (auto-generated)"

StructuredContent = dict[str, Any]


class PageContent(BaseModel):
    """Narrative part of the generated page."""

    model_config = ConfigDict(populate_by_name=True)

    summary_title: str = Field(default="", alias="summaryTitle")
    summary_body: str = Field(default="", alias="summaryBody")
    takeaways: list[str] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        """Serialise with the camelCase keys the model is asked to produce."""
        return self.model_dump(by_alias=True)


def default_page_content() -> dict[str, Any]:
    """Placeholder used when the model omits or mangles ``pageContent``."""
    return PageContent(summaryTitle=AUTO_SUMMARY_TITLE).to_wire()


def page_content_of(content: StructuredContent) -> PageContent:
    """Read the page-content object out of *content*, tolerating gaps."""
    raw = content.get(PAGE_CONTENT_KEY)
    if not isinstance(raw, dict):
        return PageContent()
    takeaways = raw.get("takeaways") or []
    if isinstance(takeaways, str):
        takeaways = [takeaways]
    elif not isinstance(takeaways, list):
        takeaways = []
    return PageContent(
        summaryTitle=str(raw.get("summaryTitle") or ""),
        summaryBody=str(raw.get("summaryBody") or ""),
        takeaways=[str(item) for item in takeaways if item is not None],
    )
