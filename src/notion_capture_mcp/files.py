"""Attached-file helpers — loading, type validation, classification, text extraction."""

from __future__ import annotations

import io
import logging
from enum import Enum
from pathlib import Path

from .errors import ValidationError
from .models.inputs import InputFile

logger = logging.getLogger(__name__)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

SUPPORTED_EXTENSIONS: dict[str, str] = {
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".pdf": "application/pdf",
    ".docx": DOCX_MIME,
    ".xlsx": XLSX_MIME,
    ".pptx": PPTX_MIME,
}

ALLOWED_MIME_TYPES = frozenset(SUPPORTED_EXTENSIONS.values())


class FileKind(str, Enum):
    """How a file is presented to the AI backend."""

    IMAGE = "image"
    TEXT = "text"
    PDF = "pdf"
    DOCX = "docx"
    XLSX = "xlsx"
    PPTX = "pptx"
    OTHER = "other"


def classify(mime_type: str) -> FileKind:
    """Map a MIME type to a FileKind."""
    if mime_type.startswith("image/"):
        return FileKind.IMAGE
    if mime_type.startswith("text/"):
        return FileKind.TEXT
    if mime_type == "application/pdf":
        return FileKind.PDF
    if mime_type == DOCX_MIME:
        return FileKind.DOCX
    if mime_type == XLSX_MIME:
        return FileKind.XLSX
    if mime_type == PPTX_MIME:
        return FileKind.PPTX
    return FileKind.OTHER


def mime_type_for(path: Path) -> str:
    """Return the MIME type for *path* by extension, or ``application/octet-stream``."""
    return SUPPORTED_EXTENSIONS.get(path.suffix.lower(), "application/octet-stream")


def validate_files(files: list[InputFile]) -> None:
    """Reject the whole batch if any file has an unsupported MIME type.

    Raises:
        ValidationError: Lists every rejected file name.
    """
    rejected = [f.name for f in files if f.mime_type not in ALLOWED_MIME_TYPES]
    if rejected:
        names = ", ".join(rejected)
        raise ValidationError(
            f"Unsupported file type(s): {names}. Please upload only supported file types."
        )


def load_file(file_path: str) -> InputFile:
    """Read a local file into an InputFile.

    Raises:
        FileNotFoundError: If the path does not exist.
    """
    p = Path(file_path).expanduser().resolve()
    if not p.is_file():
        raise FileNotFoundError(f"File not found: {file_path}")
    return InputFile(name=p.name, mime_type=mime_type_for(p), data=p.read_bytes())


def decode_text(file: InputFile) -> str:
    """Decode a text file as UTF-8, replacing undecodable bytes."""
    return file.data.decode("utf-8", errors="replace")


def _docx_text(data: bytes) -> str:
    from docx import Document

    doc = Document(io.BytesIO(data))
    return "\n".join(p.text for p in doc.paragraphs)


def _xlsx_text(data: bytes) -> str:
    from openpyxl import load_workbook

    workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    chunks: list[str] = []
    for sheet in workbook.worksheets:
        rows = []
        for row in sheet.iter_rows(values_only=True):
            rows.append(",".join("" if cell is None else str(cell) for cell in row))
        chunks.append(f"Sheet: {sheet.title}\n\n" + "\n".join(rows) + "\n\n")
    workbook.close()
    return "".join(chunks)


def _pptx_text(data: bytes) -> str:
    from pptx import Presentation

    presentation = Presentation(io.BytesIO(data))
    chunks: list[str] = []
    for index, slide in enumerate(presentation.slides, start=1):
        words = [
            run.text
            for shape in slide.shapes
            if shape.has_text_frame
            for paragraph in shape.text_frame.paragraphs
            for run in paragraph.runs
            if run.text
        ]
        chunks.append(f"Slide {index}:\n" + " ".join(words) + "\n\n")
    return "".join(chunks)


_EXTRACTORS = {
    FileKind.DOCX: ("DOCX", _docx_text),
    FileKind.XLSX: ("XLSX", _xlsx_text),
    FileKind.PPTX: ("PPTX", _pptx_text),
}


def extract_office_text(file: InputFile) -> str:
    """Render an Office Open XML file as a labelled text block.

    Raises:
        ValueError: If the file is not DOCX, XLSX or PPTX.
        ValidationError: If the document cannot be read.
    """
    kind = classify(file.mime_type)
    if kind not in _EXTRACTORS:
        raise ValueError(f"Not an office document: {file.name} ({file.mime_type})")
    label, extractor = _EXTRACTORS[kind]
    try:
        text = extractor(file.data)
    except Exception as exc:
        raise ValidationError(f"Could not read {label} file {file.name}: {exc}") from exc
    logger.debug("Extracted %d chars from %s", len(text), file.name)
    return f"Content from {label} file ({file.name}):\n\n{text}"
