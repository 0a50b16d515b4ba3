"""Local preview files for attached images.

Each image added to a session gets a temp file the client can open as a
thumbnail. Previews are index-aligned with the session's file list and
must be released when their file is removed or the input is reset.
"""

from __future__ import annotations

import itertools
import logging
import tempfile
from pathlib import Path

from .files import FileKind, classify
from .models.inputs import InputFile

logger = logging.getLogger(__name__)


class PreviewRegistry:
    """Index-aligned preview paths (``None`` for non-image files)."""

    def __init__(self) -> None:
        self._dir: Path | None = None
        self._paths: list[Path | None] = []
        self._serial = itertools.count()

    def __enter__(self) -> PreviewRegistry:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release_all()

    @property
    def paths(self) -> list[str | None]:
        return [str(p) if p else None for p in self._paths]

    def acquire(self, file: InputFile) -> str | None:
        """Create a preview for *file* and append it. Returns its path, if any."""
        path: Path | None = None
        if classify(file.mime_type) is FileKind.IMAGE:
            if self._dir is None:
                self._dir = Path(tempfile.mkdtemp(prefix="capture_preview_"))
            # Serial, not position: positions are reused after a removal.
            path = self._dir / f"{next(self._serial)}_{Path(file.name).name}"
            path.write_bytes(file.data)
        self._paths.append(path)
        return str(path) if path else None

    def release(self, index: int) -> None:
        """Delete the preview at *index* and drop its slot."""
        path = self._paths.pop(index)
        if path is not None:
            path.unlink(missing_ok=True)

    def release_all(self) -> int:
        """Delete every preview. Returns how many files were removed."""
        removed = 0
        while self._paths:
            path = self._paths.pop()
            if path is not None:
                path.unlink(missing_ok=True)
                removed += 1
        if self._dir is not None:
            try:
                self._dir.rmdir()
            except OSError:
                logger.debug("Preview dir not empty: %s", self._dir)
            self._dir = None
        return removed

    def __len__(self) -> int:
        return len(self._paths)
