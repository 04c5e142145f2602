"""Exceptions raised inside the ingestion pipeline.

Extraction errors are recoverable: the file is still uploaded and the
message is kept on the record. Storage and persistence errors skip the
file. None of these escape `IngestionSequencer.run()`.
"""

from __future__ import annotations

from typing import Any

TIMEOUT_MESSAGE = "Extraction timed out"


class VaultError(Exception):
    """Base exception for quotation vault errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ExtractionError(VaultError):
    """Text could not be derived from a file."""


class ExtractionTimeoutError(ExtractionError, TimeoutError):
    """A bounded extraction step did not settle before its deadline."""

    def __init__(self, timeout_s: float | None = None) -> None:
        super().__init__(TIMEOUT_MESSAGE, {"timeout_s": timeout_s} if timeout_s is not None else None)


class OCRError(ExtractionError):
    """The OCR engine failed or is not configured."""


class StorageError(VaultError):
    """Object storage upload or URL resolution failed."""


class PersistenceError(VaultError):
    """The document database rejected a write or a read."""
