from __future__ import annotations

from quotation_vault.ingestion.extractors.base import Extractor
from quotation_vault.ingestion.timeouts import DEFAULT_TIMEOUT_S, with_timeout
from quotation_vault.ingestion.types import ExtractResult, SelectedFile


class TextExtractor(Extractor):
    def __init__(self, *, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        self._timeout_s = timeout_s

    def can_handle(self, media_type: str) -> bool:
        return media_type.startswith("text/")

    async def extract(self, *, file: SelectedFile) -> ExtractResult:
        # Passed through verbatim, no normalization
        text = await with_timeout(file.read_text(), self._timeout_s)
        return ExtractResult(text=text, strategy="text")
