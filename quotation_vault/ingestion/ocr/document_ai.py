from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from google.api_core import exceptions as gexc
from google.cloud import documentai_v1 as documentai

from quotation_vault.ingestion.errors import OCRError


@dataclass(frozen=True)
class DocAIConfig:
    project: str
    location: str
    processor_id: str

    @property
    def processor_name(self) -> str:
        return f"projects/{self.project}/locations/{self.location}/processors/{self.processor_id}"

    @property
    def api_endpoint(self) -> str:
        return f"{self.location}-documentai.googleapis.com"


class DocumentAIClient:
    """
    Minimal Document AI helper for online OCR of uploaded images.
    Blocking; callers run it in a worker thread.
    """

    def __init__(self, *, cfg: DocAIConfig, doc_client: Any | None = None) -> None:
        self._cfg = cfg
        if doc_client is None:
            doc_client = documentai.DocumentProcessorServiceClient(
                client_options={"api_endpoint": cfg.api_endpoint}
            )
        self._doc_client = doc_client

    def ocr_online(
        self,
        *,
        content: bytes,
        mime_type: str,
        language_hints: Sequence[str] = ("en",),
    ) -> tuple[str, dict[str, Any]]:
        req = documentai.ProcessRequest(
            name=self._cfg.processor_name,
            raw_document=documentai.RawDocument(content=content, mime_type=mime_type),
            process_options=documentai.ProcessOptions(
                ocr_config=documentai.OcrConfig(
                    hints=documentai.OcrConfig.Hints(language_hints=list(language_hints)),
                )
            ),
        )
        try:
            resp = self._doc_client.process_document(request=req)
        except gexc.GoogleAPIError as e:
            raise OCRError(str(e) or type(e).__name__, {"mime_type": mime_type}) from e

        text = resp.document.text or ""
        meta = {
            "provider": "documentai",
            "mode": "online",
            "mime_type": mime_type,
            "pages": len(resp.document.pages) if resp.document.pages else None,
        }
        return text, meta
