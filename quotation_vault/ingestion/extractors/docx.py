from __future__ import annotations

import io
import zipfile
from collections.abc import Iterator
from typing import Any

import docx  # python-docx
from docx.opc.exceptions import PackageNotFoundError
from docx.table import Table

from quotation_vault.ingestion.errors import ExtractionError
from quotation_vault.ingestion.extractors.base import Extractor, normalize_text
from quotation_vault.ingestion.timeouts import DEFAULT_TIMEOUT_S, run_blocking, with_timeout
from quotation_vault.ingestion.types import ExtractResult, SelectedFile

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _block_texts(container: Any) -> Iterator[str]:
    """Paragraph texts of a body or cell in document order, tables included."""
    for block in container.iter_inner_content():
        if isinstance(block, Table):
            for row in block.rows:
                # Merged cells repeat across the grid; emit each once
                seen: list[Any] = []
                for cell in row.cells:
                    if any(cell._tc is tc for tc in seen):
                        continue
                    seen.append(cell._tc)
                    yield from _block_texts(cell)
        else:
            yield block.text


def docx_to_text(data: bytes) -> str:
    try:
        d = docx.Document(io.BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
        raise ExtractionError(f"Could not read Word document: {e}") from e
    parts = [t for t in _block_texts(d) if t and t.strip()]
    return normalize_text("\n".join(parts))


class DocxExtractor(Extractor):
    def __init__(self, *, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        self._timeout_s = timeout_s

    def can_handle(self, media_type: str) -> bool:
        return media_type == DOCX_MIME

    async def extract(self, *, file: SelectedFile) -> ExtractResult:
        # Byte read and conversion are bounded separately
        data = await with_timeout(file.read_bytes(), self._timeout_s)
        text = await run_blocking(docx_to_text, data, timeout_s=self._timeout_s)
        return ExtractResult(text=text or "", strategy="docx")
