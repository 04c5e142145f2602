from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from quotation_vault.ingestion.extractors.docx import DOCX_MIME
from quotation_vault.ingestion.types import SelectedFile, UploadBatch

OCTET_STREAM = "application/octet-stream"

_MEDIA_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".docx": DOCX_MIME,
    ".doc": "application/msword",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".html": "text/html",
    ".htm": "text/html",
}


def guess_media_type(name: str) -> str:
    """Declared type for a local file, from its extension (case-insensitive)."""
    return _MEDIA_TYPES.get(Path(name).suffix.lower(), OCTET_STREAM)


def collect_files(paths: Iterable[str | Path]) -> UploadBatch:
    """Build a batch in the given order. Directories are skipped, missing paths raise."""
    files: list[SelectedFile] = []
    for raw in paths:
        p = Path(raw)
        if p.is_dir():
            continue
        st = p.stat()
        files.append(
            SelectedFile(
                name=p.name,
                media_type=guess_media_type(p.name),
                source=p,
                last_modified=int(st.st_mtime * 1000),
            )
        )
    return tuple(files)
