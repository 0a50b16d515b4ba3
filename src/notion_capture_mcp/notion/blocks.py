"""Page body assembly — summary, takeaways, original text and files.

Notion rejects any single rich-text item longer than 2000 characters, so
long text is split into consecutive chunks. File blocks follow the order
of the input file list exactly.
"""

from __future__ import annotations

from typing import Any

from ..files import FileKind, classify
from ..formatters import format_file_size
from ..models.content import StructuredContent, page_content_of
from ..models.inputs import InputFile

TEXT_CHUNK_LIMIT = 2000
DEFAULT_SUMMARY_HEADING = "Summary"
TAKEAWAYS_HEADING = "Key Takeaways"
ORIGINAL_TEXT_HEADING = "Original Text"
ORIGINAL_FILES_HEADING = "Original Files"
UPLOAD_FAILED_EMOJI = "📎"


def chunk_text(text: str, limit: int = TEXT_CHUNK_LIMIT) -> list[str]:
    """Split *text* into consecutive pieces of at most *limit* characters."""
    return [text[i:i + limit] for i in range(0, len(text), limit)]


def rich_text(content: str, link: str | None = None) -> list[dict[str, Any]]:
    """Rich-text array for *content*, chunked to Notion's item limit."""
    items = []
    for chunk in chunk_text(content):
        text: dict[str, Any] = {"content": chunk}
        if link:
            text["link"] = {"url": link}
        items.append({"type": "text", "text": text})
    return items


def _block(block_type: str, body: dict[str, Any]) -> dict[str, Any]:
    return {"object": "block", "type": block_type, block_type: body}


def heading(text: str) -> dict[str, Any]:
    return _block("heading_2", {"rich_text": rich_text(text)})


def divider() -> dict[str, Any]:
    return _block("divider", {})


def bullet(text: str) -> dict[str, Any]:
    return _block("bulleted_list_item", {"rich_text": rich_text(text)})


def paragraph_blocks(text: str) -> list[dict[str, Any]]:
    """One paragraph block per 2000-character chunk (none for empty text)."""
    return [_block("paragraph", {"rich_text": rich_text(chunk)}) for chunk in chunk_text(text)]


def file_embed(file: InputFile, url: str) -> dict[str, Any]:
    """Embed suited to the file's media kind."""
    kind = classify(file.mime_type)
    if kind is FileKind.IMAGE:
        return _block("image", {"type": "external", "external": {"url": url}})
    if kind is FileKind.PDF:
        return _block("embed", {"url": url})
    return _block("file", {"type": "external", "external": {"url": url}, "name": file.name})


def file_metadata(file: InputFile, url: str) -> dict[str, Any]:
    """Paragraph with size, content type and a link to the uploaded file."""
    details = f"{format_file_size(file.size)} · {file.mime_type} · "
    return _block("paragraph", {"rich_text": rich_text(details) + rich_text("Open file", link=url)})


def file_block(file: InputFile) -> dict[str, Any]:
    """Collapsible entry for an uploaded file, or a callout if its upload failed."""
    if not file.public_url:
        return _block("callout", {
            "rich_text": rich_text(f"Analyzed file (upload failed): {file.name}"),
            "icon": {"emoji": UPLOAD_FAILED_EMOJI},
        })
    return _block("toggle", {
        "rich_text": rich_text(file.name),
        "children": [file_metadata(file, file.public_url), file_embed(file, file.public_url)],
    })


def build_page_blocks(
    content: StructuredContent,
    original_text: str = "",
    files: list[InputFile] | None = None,
) -> list[dict[str, Any]]:
    """Assemble the ordered ``children`` list for a new page."""
    page = page_content_of(content)
    children = [
        heading(page.summary_title or DEFAULT_SUMMARY_HEADING),
        *paragraph_blocks(page.summary_body),
        divider(),
        heading(TAKEAWAYS_HEADING),
        *(bullet(item) for item in page.takeaways),
    ]
    if original_text:
        children += [divider(), heading(ORIGINAL_TEXT_HEADING), *paragraph_blocks(original_text)]
    if files:
        children += [divider(), heading(ORIGINAL_FILES_HEADING)]
        children.extend(file_block(f) for f in files)
    return children
