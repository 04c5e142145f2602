from __future__ import annotations

import logging

from quotation_vault.ingestion.errors import OCRError
from quotation_vault.ingestion.extractors.base import Extractor, normalize_text
from quotation_vault.ingestion.ocr.document_ai import DocumentAIClient
from quotation_vault.ingestion.timeouts import DEFAULT_TIMEOUT_S, run_blocking
from quotation_vault.ingestion.types import ExtractResult, SelectedFile

logger = logging.getLogger(__name__)


class ImageExtractor(Extractor):
    def __init__(
        self,
        *,
        docai: DocumentAIClient | None,
        language: str = "en",
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self._docai = docai
        self._language = language
        self._timeout_s = timeout_s

    def can_handle(self, media_type: str) -> bool:
        return media_type.startswith("image/")

    async def extract(self, *, file: SelectedFile) -> ExtractResult:
        if self._docai is None:
            raise OCRError("OCR engine not configured")
        data = await file.read_bytes()
        text, meta = await run_blocking(
            self._docai.ocr_online,
            content=data,
            mime_type=file.media_type,
            language_hints=(self._language,),
            timeout_s=self._timeout_s,
        )
        logger.debug("OCR %s pages=%s", file.name, meta.get("pages"))
        return ExtractResult(text=normalize_text(text), strategy="docai_online", used_ocr=True)
