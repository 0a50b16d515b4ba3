"""Upload side-channel — makes attached files publicly fetchable.

``POST <upload_url>?filename=<name>`` with the raw bytes; the JSON reply
carries ``url``. A failed upload is not an error for the session: the file
is still analysed and the page gets a fallback note instead of an embed.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from .config import get_config
from .models.inputs import InputFile

logger = logging.getLogger(__name__)


async def upload_file(client: httpx.AsyncClient, upload_url: str, file: InputFile) -> str | None:
    """Upload one file and return its public URL, or ``None`` on any failure."""
    try:
        response = await client.post(
            upload_url,
            params={"filename": file.name},
            content=file.data,
            headers={"Content-Type": file.mime_type},
        )
        if not response.is_success:
            logger.warning("Upload of %s failed (%d): %s", file.name, response.status_code, response.text[:200])
            return None
        url = response.json().get("url")
    except (httpx.HTTPError, ValueError, AttributeError) as exc:
        logger.warning("Upload of %s failed: %s", file.name, exc)
        return None
    return url or None


async def upload_batch(files: list[InputFile]) -> list[str | None]:
    """Upload one newly added batch of files concurrently.

    Only *files* are sent, never other entries of the session: a file whose
    upload failed earlier is not retried, and a file still uploading from a
    previous batch is not sent twice. Each result is written back onto the
    file object it came from, so completion order and partial failures
    cannot shift a URL onto the wrong entry. Returns the URLs aligned with
    *files*.
    """
    cfg = get_config()
    pending = [f for f in files if not f.public_url]
    if not pending:
        return [f.public_url for f in files]
    if not cfg.upload_url:
        logger.info("CAPTURE_UPLOAD_URL not set; %d file(s) will not be embedded", len(pending))
        return [f.public_url for f in files]

    async with httpx.AsyncClient(timeout=cfg.http_timeout) as client:
        results = await asyncio.gather(
            *(upload_file(client, cfg.upload_url, f) for f in pending)
        )
    for file, url in zip(pending, results):
        file.public_url = url
    logger.info("Uploaded %d/%d file(s)", sum(1 for u in results if u), len(pending))
    return [f.public_url for f in files]
