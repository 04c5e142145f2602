from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

SUMMARY_MAX_CHARS = 600


@dataclass(frozen=True)
class SelectedFile:
    name: str  # not guaranteed unique within a batch
    media_type: str  # declared MIME type, may be empty
    source: bytes | Path
    last_modified: int | None = None  # epoch millis, display only

    async def read_bytes(self) -> bytes:
        if isinstance(self.source, Path):
            return await asyncio.to_thread(self.source.read_bytes)
        return bytes(self.source)

    async def read_text(self) -> str:
        data = await self.read_bytes()
        # A leading BOM is dropped, as browsers do
        return data.decode("utf-8-sig", errors="replace")

    @property
    def display_key(self) -> str:
        return f"{self.name}{self.last_modified or ''}"


UploadBatch = tuple[SelectedFile, ...]


@dataclass(frozen=True)
class ExtractResult:
    text: str
    strategy: str
    used_ocr: bool = False


@dataclass(frozen=True)
class QuotationRecord:
    file_url: str
    filename: str
    media_type: str
    uploaded_at: str  # ISO-8601, sort key
    extracted_text_summary: str
    extraction_error: str | None = None
    id: str | None = None

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "file_url": self.file_url,
            "filename": self.filename,
            "media_type": self.media_type,
            "uploaded_at": self.uploaded_at,
            "extracted_text_summary": self.extracted_text_summary,
        }
        if self.extraction_error:
            doc["extraction_error"] = self.extraction_error
        return doc

    @classmethod
    def from_document(cls, doc_id: str | None, data: Mapping[str, Any]) -> QuotationRecord:
        return cls(
            id=doc_id,
            file_url=str(data.get("file_url") or ""),
            filename=str(data.get("filename") or ""),
            media_type=str(data.get("media_type") or ""),
            uploaded_at=str(data.get("uploaded_at") or ""),
            extracted_text_summary=str(data.get("extracted_text_summary") or ""),
            extraction_error=data.get("extraction_error") or None,
        )


@dataclass
class UploadState:
    """What the presentation layer renders while and after a batch runs.

    `error` is a single slot: a later failure overwrites an earlier one.
    """

    processing: bool = False
    progress: int = 0
    step: str = ""
    error: str | None = None
    selection: list[SelectedFile] = field(default_factory=list)
    records: list[QuotationRecord] = field(default_factory=list)

    def snapshot(self) -> UploadState:
        return replace(self, selection=list(self.selection), records=list(self.records))


def summarize_text(text: str | None, limit: int = SUMMARY_MAX_CHARS) -> str:
    if not text:
        return ""
    return text[: min(limit, SUMMARY_MAX_CHARS)]


def sort_records(records: Iterable[QuotationRecord]) -> list[QuotationRecord]:
    # ISO-8601 strings in one offset sort lexicographically
    return sorted(records, key=lambda r: r.uploaded_at, reverse=True)
