from __future__ import annotations

import logging
from collections.abc import Sequence

from quotation_vault.ingestion.config import IngestConfig
from quotation_vault.ingestion.errors import ExtractionError
from quotation_vault.ingestion.extractors.base import Extractor
from quotation_vault.ingestion.extractors.docx import DocxExtractor
from quotation_vault.ingestion.extractors.image import ImageExtractor
from quotation_vault.ingestion.extractors.pdf import PdfExtractor
from quotation_vault.ingestion.extractors.text import TextExtractor
from quotation_vault.ingestion.ocr.document_ai import DocAIConfig, DocumentAIClient
from quotation_vault.ingestion.types import SelectedFile

logger = logging.getLogger(__name__)

UNSUPPORTED_PLACEHOLDER = "[Unsupported file type]"


class ExtractionRouter:
    """Dispatch a file to the first extractor that claims its media type.

    Order matters: image, pdf, docx, text. Anything left over gets the
    unsupported placeholder rather than an error.
    """

    def __init__(self, extractors: Sequence[Extractor]) -> None:
        self._extractors = list(extractors)

    @classmethod
    def from_config(cls, cfg: IngestConfig, *, docai: DocumentAIClient | None = None) -> ExtractionRouter:
        if docai is None and cfg.ocr_enabled:
            docai = DocumentAIClient(
                cfg=DocAIConfig(
                    project=cfg.docai_project or "",
                    location=cfg.docai_location or "",
                    processor_id=cfg.docai_processor_id or "",
                )
            )
        timeout_s = cfg.extract_timeout_s
        return cls(
            [
                ImageExtractor(docai=docai, language=cfg.ocr_language, timeout_s=timeout_s),
                PdfExtractor(),
                DocxExtractor(timeout_s=timeout_s),
                TextExtractor(timeout_s=timeout_s),
            ]
        )

    def select(self, media_type: str) -> Extractor | None:
        return next((ex for ex in self._extractors if ex.can_handle(media_type)), None)

    async def extract(self, file: SelectedFile) -> str:
        """Return extracted text, or raise ExtractionError."""
        media_type = file.media_type or ""
        logger.info("Extracting: %s %s", media_type, file.name)
        extractor = self.select(media_type)
        if extractor is None:
            return UNSUPPORTED_PLACEHOLDER
        try:
            res = await extractor.extract(file=file)
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(str(e), {"extractor": type(extractor).__name__}) from e
        return res.text or ""
