"""Document reader for generation input.

Accepted formats:
  - ``.txt``, ``.md``, ``.markdown``: decoded as UTF-8 (undecodable bytes
    are replaced, never fatal)
  - ``.docx``: paragraph text in document order, then every table row as a
    ``| cell | cell |`` line

Size is checked before anything is decoded.
"""

from __future__ import annotations

import io
import os
import zipfile
from pathlib import Path

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from ..core.exceptions import ExtractionFailure, UnsupportedInput
from ..utils.logger import get_logger

logger = get_logger(__name__)

MAX_DOCUMENT_BYTES = 10 * 1024 * 1024

TEXT_EXTENSIONS = (".txt", ".md", ".markdown")
WORD_EXTENSIONS = (".docx",)
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS + WORD_EXTENSIONS

FILE_TYPE_NAMES = {
    ".txt": "Text File",
    ".md": "Markdown File",
    ".markdown": "Markdown File",
    ".docx": "Word Document",
}


def load_document(
    path: str | os.PathLike[str],
    max_bytes: int = MAX_DOCUMENT_BYTES,
) -> str:
    """Read the document at *path* and return its text.

    Raises:
        UnsupportedInput: Unknown extension or file larger than *max_bytes*.
        ExtractionFailure: The file holds no text.
    """
    path = Path(path)
    _check_extension(path.name)
    size = path.stat().st_size
    _check_size(path.name, size, max_bytes)
    return read_document(path.name, path.read_bytes(), max_bytes=max_bytes)


def read_document(
    filename: str,
    data: bytes,
    max_bytes: int = MAX_DOCUMENT_BYTES,
) -> str:
    """Extract text from an uploaded document's raw bytes.

    *filename* only selects the format; it is never opened.
    """
    suffix = _check_extension(filename)
    _check_size(filename, len(data), max_bytes)

    if suffix in WORD_EXTENSIONS:
        text = _read_docx(filename, data)
    else:
        text = data.decode("utf-8", errors="replace")

    if not text.strip():
        raise ExtractionFailure(
            f"No text content found in {FILE_TYPE_NAMES[suffix]} {filename!r}"
        )

    logger.info("Read %d characters from %s", len(text), filename)
    return text


def format_file_size(size: int) -> str:
    """Human-readable size: ``0 Bytes``, ``1.5 KB``, ``10 MB``."""
    if size == 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_extension(filename: str) -> str:
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        shown = suffix or "(none)"
        raise UnsupportedInput(
            f"Unsupported file type: {shown}. "
            f"Please use {', '.join(SUPPORTED_EXTENSIONS)} files."
        )
    return suffix


def _check_size(filename: str, size: int, max_bytes: int) -> None:
    if size > max_bytes:
        raise UnsupportedInput(
            f"File {filename!r} is too large ({format_file_size(size)}). "
            f"Maximum size is {format_file_size(max_bytes)}."
        )


def _read_docx(filename: str, data: bytes) -> str:
    try:
        document = Document(io.BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
        raise ExtractionFailure(f"Failed to read Word document {filename!r}: {exc}") from exc

    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            lines.append("| " + " | ".join(cells) + " |")
    return "\n".join(lines)
