"""Capture tools — 10 tools on a FastMCP sub-server.

A capture session holds the raw input (text + files), the working
StructuredContent and the session status. The flow is
process → optionally edit/refine → publish. A failed step leaves the
previous content and inputs untouched so the caller can retry.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..connections import connection_registry
from ..errors import ValidationError, make_tool_error
from ..files import load_file, validate_files
from ..formatters import format_file_size
from ..models.content import PAGE_CONTENT_KEY, PageContent, default_page_content
from ..notion.publisher import publish
from ..pipeline import process_content, refine_content
from ..sessions import CaptureSession, session_store
from ..state import SetError, SetStatus, SetSuccess
from ..tracing import tag_trace, trace
from ..types import FilePaths, RefineInstruction, SessionId, coerce_json_param
from ..uploads import upload_batch
from .notion import load_schema

logger = logging.getLogger(__name__)

capture_server = FastMCP("capture")


def _session_view(session: CaptureSession) -> dict[str, Any]:
    previews = session.previews.paths
    return {
        "session_id": session.session_id,
        "status": session.state.status,
        "error": session.state.error,
        "success_message": session.state.success_message,
        "text_length": len(session.bundle.text),
        "files": [
            {
                "index": i,
                "name": f.name,
                "mime_type": f.mime_type,
                "size": format_file_size(f.size),
                "public_url": f.public_url,
                "preview_path": previews[i] if i < len(previews) else None,
            }
            for i, f in enumerate(session.bundle.files)
        ],
        "content": session.content,
    }


def _fail(session: CaptureSession, exc: Exception) -> dict:
    """Record *exc* on the session and return the tool error dict."""
    error = make_tool_error(exc)
    session.dispatch(SetError(error["error"]))
    return error


def _edited_content(content: dict[str, Any]) -> dict[str, Any]:
    """Validate a user-supplied StructuredContent, filling a missing pageContent."""
    edited = dict(content)
    raw = edited.get(PAGE_CONTENT_KEY)
    if raw is None:
        edited[PAGE_CONTENT_KEY] = default_page_content()
    elif isinstance(raw, dict):
        edited[PAGE_CONTENT_KEY] = PageContent.model_validate(raw).to_wire()
    else:
        raise ValidationError("pageContent must be an object with summaryTitle, summaryBody and takeaways.")
    return edited


@capture_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=False,
    )
)
@trace(name="capture_start", span_type="TOOL")
async def capture_start() -> dict:
    """Start a new capture session.

    Returns:
        Dict with session_id and the empty session state.
    """
    session = session_store.create()
    logger.info("Started capture session %s", session.session_id)
    return _session_view(session)


@capture_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
@trace(name="capture_set_text", span_type="TOOL")
async def capture_set_text(
    session_id: SessionId,
    text: Annotated[str, Field(description="Raw notes or content to capture")],
) -> dict:
    """Replace the session's raw input text.

    Args:
        session_id: Session from capture_start.
        text: Free-form text; an empty string clears it.

    Returns:
        Dict with the session state.
    """
    try:
        session = session_store.get(session_id)
    except KeyError as exc:
        return make_tool_error(exc)
    session.bundle.text = text
    return _session_view(session)


@capture_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="capture_add_files", span_type="TOOL")
async def capture_add_files(session_id: SessionId, file_paths: FilePaths) -> dict:
    """Attach local files to the session and upload them for embedding.

    The whole batch is rejected if any file has an unsupported type. New
    files upload concurrently; a failed upload is not an error, the page
    gets a fallback note for that file instead of an embed.

    Args:
        session_id: Session from capture_start.
        file_paths: Paths to txt, md, png, jpg, pdf, docx, xlsx or pptx files.

    Returns:
        Dict with the session state, including each file's public_url.
    """
    file_paths = coerce_json_param(file_paths, list)
    try:
        session = session_store.get(session_id)
    except KeyError as exc:
        return make_tool_error(exc)
    tag_trace(session_id=session_id)

    try:
        files = [load_file(p) for p in file_paths]
        validate_files(files)
    except (FileNotFoundError, ValidationError) as exc:
        return _fail(session, exc)

    session.add_files(files)
    await upload_batch(files)
    return _session_view(session)


@capture_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=True,
        idempotentHint=False,
        openWorldHint=False,
    )
)
@trace(name="capture_remove_file", span_type="TOOL")
async def capture_remove_file(
    session_id: SessionId,
    index: Annotated[int, Field(ge=0, description="Zero-based position in the file list")],
) -> dict:
    """Remove one attached file and release its preview.

    Args:
        session_id: Session from capture_start.
        index: Position of the file, as listed by capture_status.

    Returns:
        Dict with the session state.
    """
    try:
        session = session_store.get(session_id)
    except KeyError as exc:
        return make_tool_error(exc)
    try:
        removed = session.remove_file(index)
    except IndexError as exc:
        return _fail(session, exc)
    logger.debug("Removed %s from session %s", removed.name, session_id)
    return _session_view(session)


@capture_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="capture_process", span_type="TOOL")
async def capture_process(session_id: SessionId) -> dict:
    """Have the AI fill the active database's fields and write the page summary.

    Uses the active Notion connection's schema and prompt. The result
    replaces any previous content only when the whole step succeeds.

    Args:
        session_id: Session from capture_start.

    Returns:
        Dict with the session state; ``content`` holds the new StructuredContent.
    """
    try:
        session = session_store.get(session_id)
    except KeyError as exc:
        return make_tool_error(exc)
    tag_trace(session_id=session_id)

    async with session.lock:
        try:
            connection = connection_registry.resolve()
            if connection_registry.schema(connection.id) is None:
                session.dispatch(SetStatus("fetchingSchema"))
            schema = await load_schema(connection.id)
            session.dispatch(SetStatus("processingAI"))
            content = await process_content(session.bundle, schema, connection)
        except Exception as exc:
            return _fail(session, exc)
        session.content = content
        session.dispatch(SetStatus("idle"))
    return _session_view(session)


@capture_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
@trace(name="capture_edit", span_type="TOOL")
async def capture_edit(
    session_id: SessionId,
    content: Annotated[dict | str, Field(
        description="Complete StructuredContent (field name → value, plus pageContent)",
    )],
) -> dict:
    """Replace the working content with a user-edited version.

    Args:
        session_id: Session from capture_start.
        content: The full edited object; a missing pageContent gets the default.

    Returns:
        Dict with the session state.
    """
    content = coerce_json_param(content, dict)
    try:
        session = session_store.get(session_id)
    except KeyError as exc:
        return make_tool_error(exc)
    try:
        if not isinstance(content, dict):
            raise ValidationError("content must be a JSON object.")
        session.content = _edited_content(content)
    except Exception as exc:
        return _fail(session, exc)
    return _session_view(session)


@capture_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="capture_refine", span_type="TOOL")
async def capture_refine(session_id: SessionId, instruction: RefineInstruction) -> dict:
    """Ask the AI to revise the current content following an instruction.

    Refinements on one session run one at a time; a second call waits for
    the first to finish. Creation dates keep their existing value.

    Args:
        session_id: Session from capture_start.
        instruction: What to change, e.g. "translate the takeaways to English".

    Returns:
        Dict with the session state; ``content`` holds the refined result.
    """
    try:
        session = session_store.get(session_id)
    except KeyError as exc:
        return make_tool_error(exc)
    tag_trace(session_id=session_id)

    async with session.lock:
        try:
            connection = connection_registry.resolve()
            schema = await load_schema(connection.id)
            session.dispatch(SetStatus("refiningAI"))
            content = await refine_content(
                session.content or {}, instruction, session.bundle, schema,
            )
        except Exception as exc:
            return _fail(session, exc)
        session.content = content
        session.dispatch(SetStatus("idle"))
    return _session_view(session)


@capture_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="capture_publish", span_type="TOOL")
async def capture_publish(session_id: SessionId) -> dict:
    """Create a page in the active Notion database from the current content.

    On success the session's inputs and content are cleared. Not
    idempotent: calling again after a timeout may create a duplicate page.

    Args:
        session_id: Session from capture_start.

    Returns:
        Dict with page_id, url, app_url, message and the session state.
    """
    try:
        session = session_store.get(session_id)
    except KeyError as exc:
        return make_tool_error(exc)
    tag_trace(session_id=session_id)

    async with session.lock:
        try:
            if not session.content:
                raise ValidationError("Nothing to publish yet. Process some content first.")
            connection = connection_registry.resolve()
            schema = await load_schema(connection.id)
            session.dispatch(SetStatus("uploadingNotion"))
            result = await publish(connection, session.content, schema, session.bundle)
        except Exception as exc:
            return _fail(session, exc)
        session.reset_inputs()
        session.dispatch(SetSuccess(result.message))
    return {**result.model_dump(), "session": _session_view(session)}


@capture_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=True,
        idempotentHint=True,
        openWorldHint=False,
    )
)
@trace(name="capture_reset", span_type="TOOL")
async def capture_reset(session_id: SessionId) -> dict:
    """Clear the session's text, files, content and status.

    Args:
        session_id: Session from capture_start.

    Returns:
        Dict with the (now empty) session state.
    """
    try:
        session = session_store.get(session_id)
    except KeyError as exc:
        return make_tool_error(exc)
    session.reset()
    return _session_view(session)


@capture_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
@trace(name="capture_status", span_type="TOOL")
async def capture_status(session_id: SessionId) -> dict:
    """Show the session's status, attached files and current content."""
    try:
        session = session_store.get(session_id)
    except KeyError as exc:
        return make_tool_error(exc)
    return _session_view(session)
