"""Pydantic response schemas for the quotation vault API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from quotation_vault.ingestion.types import SUMMARY_MAX_CHARS, QuotationRecord, UploadState, summarize_text

# -- Quotations ---------------------------------------------------------------


class QuotationOut(BaseModel):
    id: str | None = None
    file_url: str
    filename: str
    media_type: str
    uploaded_at: str
    extracted_text_summary: str = Field("", max_length=SUMMARY_MAX_CHARS)
    extraction_error: str | None = None

    @classmethod
    def from_record(cls, r: QuotationRecord) -> QuotationOut:
        return cls(
            id=r.id,
            file_url=r.file_url,
            filename=r.filename,
            media_type=r.media_type,
            uploaded_at=r.uploaded_at,
            extracted_text_summary=summarize_text(r.extracted_text_summary),
            extraction_error=r.extraction_error,
        )


class QuotationListResponse(BaseModel):
    quotations: list[QuotationOut]
    total: int


# -- Uploads ------------------------------------------------------------------


class UploadStatus(BaseModel):
    processing: bool
    progress: int = Field(..., ge=0, le=100)
    step: str
    error: str | None = None
    selected: list[str] = Field(default_factory=list, description="Names of files in the running batch")

    @classmethod
    def from_state(cls, s: UploadState) -> UploadStatus:
        return cls(
            processing=s.processing,
            progress=s.progress,
            step=s.step,
            error=s.error,
            selected=[f.name for f in s.selection],
        )


class UploadResponse(BaseModel):
    status: UploadStatus
    quotations: list[QuotationOut]


# -- Health -------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    error: str | None = None
