from __future__ import annotations

import os
from dataclasses import dataclass

from quotation_vault.ingestion.types import SUMMARY_MAX_CHARS


def _get_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "t", "yes", "y", "on")


def _get_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None:
        return default
    return int(v)


@dataclass(frozen=True)
class IngestConfig:
    # GCS
    storage_bucket: str
    storage_prefix: str  # key namespace, e.g. "quotations"
    signed_url_ttl_s: int  # 0 = public URL

    # Document collection
    collection: str

    # Extraction
    extract_timeout_ms: int
    summary_chars: int

    # OCR / Document AI
    ocr_enabled: bool
    docai_project: str | None
    docai_location: str | None
    docai_processor_id: str | None
    ocr_language: str

    @property
    def extract_timeout_s(self) -> float:
        return self.extract_timeout_ms / 1000.0

    @classmethod
    def from_env(cls) -> IngestConfig:
        bucket = os.getenv("VAULT_STORAGE_BUCKET")
        if not bucket:
            raise ValueError("VAULT_STORAGE_BUCKET is required")

        prefix = os.getenv("VAULT_STORAGE_PREFIX", "quotations").strip("/")

        return cls(
            storage_bucket=bucket,
            storage_prefix=prefix,
            signed_url_ttl_s=_get_int("VAULT_SIGNED_URL_TTL_S", 7 * 24 * 3600),
            collection=os.getenv("VAULT_COLLECTION", "quotations"),
            extract_timeout_ms=_get_int("VAULT_EXTRACT_TIMEOUT_MS", 10_000),
            summary_chars=_get_int("VAULT_SUMMARY_CHARS", SUMMARY_MAX_CHARS),
            ocr_enabled=_get_bool("VAULT_OCR_ENABLED", True),
            docai_project=os.getenv("VAULT_DOC_AI_PROJECT"),
            docai_location=os.getenv("VAULT_DOC_AI_LOCATION"),
            docai_processor_id=os.getenv("VAULT_DOC_AI_PROCESSOR_ID"),
            ocr_language=os.getenv("VAULT_OCR_LANGUAGE", "en"),
        )

    def validate(self) -> None:
        if not self.storage_prefix:
            raise ValueError("VAULT_STORAGE_PREFIX must not be empty")
        if not self.collection:
            raise ValueError("VAULT_COLLECTION must not be empty")

        if self.ocr_enabled:
            missing = [
                k
                for k, v in {
                    "VAULT_DOC_AI_PROJECT": self.docai_project,
                    "VAULT_DOC_AI_LOCATION": self.docai_location,
                    "VAULT_DOC_AI_PROCESSOR_ID": self.docai_processor_id,
                }.items()
                if not v
            ]
            if missing:
                raise ValueError(f"OCR enabled but missing DocAI config: {', '.join(missing)}")

        if self.extract_timeout_ms < 1:
            raise ValueError("VAULT_EXTRACT_TIMEOUT_MS must be >= 1")
        if not 0 <= self.summary_chars <= SUMMARY_MAX_CHARS:
            raise ValueError(f"VAULT_SUMMARY_CHARS must be between 0 and {SUMMARY_MAX_CHARS}")
        if self.signed_url_ttl_s < 0:
            raise ValueError("VAULT_SIGNED_URL_TTL_S must be >= 0")
