from __future__ import annotations

from quotation_vault.ingestion.extractors.base import Extractor
from quotation_vault.ingestion.types import ExtractResult, SelectedFile

PDF_MIME = "application/pdf"
PDF_PLACEHOLDER = "[PDF text extraction coming soon]"


class PdfExtractor(Extractor):
    """Placeholder strategy: returns immediately, is never timed out and never fails."""

    def can_handle(self, media_type: str) -> bool:
        return media_type == PDF_MIME

    async def extract(self, *, file: SelectedFile) -> ExtractResult:
        return ExtractResult(text=PDF_PLACEHOLDER, strategy="pdf_placeholder")
