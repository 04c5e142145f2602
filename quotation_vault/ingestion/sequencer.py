from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from quotation_vault.ingestion.config import IngestConfig
from quotation_vault.ingestion.extractors.router import ExtractionRouter
from quotation_vault.ingestion.gcs import ObjectStorage, object_key
from quotation_vault.ingestion.types import (
    QuotationRecord,
    SelectedFile,
    UploadState,
    sort_records,
    summarize_text,
)
from quotation_vault.stores.record_store import RecordStore

logger = logging.getLogger(__name__)

StateListener = Callable[[UploadState], None]


def _now() -> datetime:
    return datetime.now(UTC)


def progress_percent(done: int, total: int) -> int:
    """round(100 * done / total), halves rounded up."""
    if total <= 0:
        return 0
    return (200 * done + total) // (2 * total)


def _message(exc: BaseException, fallback: str) -> str:
    return str(exc) or fallback


class IngestionSequencer:
    """Runs one upload batch at a time, one file at a time, in selection order.

    Per file: extract text, upload the original, record metadata. An
    extraction failure still uploads; an upload or record failure skips
    the record. Nothing raised by a file escapes `run()`; the latest
    failure is left in `state.error`.
    """

    def __init__(
        self,
        *,
        cfg: IngestConfig,
        router: ExtractionRouter,
        storage: ObjectStorage,
        store: RecordStore,
        clock: Callable[[], datetime] = _now,
        listener: StateListener | None = None,
    ) -> None:
        self._cfg = cfg
        self._router = router
        self._storage = storage
        self._store = store
        self._clock = clock
        self._listener = listener
        self.state = UploadState()

    @property
    def busy(self) -> bool:
        return self.state.processing

    def select(self, files: Iterable[SelectedFile]) -> None:
        """Replace the pending selection."""
        self.state.selection = list(files)
        self._emit()

    async def run(self, batch: Iterable[SelectedFile] | None = None) -> None:
        if self.state.processing:
            raise RuntimeError("An upload batch is already running")

        files = tuple(batch) if batch is not None else tuple(self.state.selection)
        self.state.selection = list(files)
        self.state.processing = True
        self.state.progress = 0
        self.state.error = None
        self._emit()

        n = len(files)
        logger.info("Batch started: %d file(s)", n)
        try:
            for i, file in enumerate(files):
                await self._process_file(file)
                self.state.progress = progress_percent(i + 1, n)
                self._emit()
        finally:
            self.state.processing = False
            self.state.selection = []
            self.state.step = ""
            self._emit()

        try:
            await self.refresh()
        except Exception as e:
            # Previous list stays on display
            self._set_error(f"Refresh failed: {_message(e, 'Refresh failed')}")
            logger.warning("Refresh after batch failed: %s", e)
        logger.info("Batch finished: %d file(s), last_error=%s", n, self.state.error)

    async def refresh(self) -> list[QuotationRecord]:
        """Re-query every record and replace the display list."""
        docs = await self._store.list_all(self._cfg.collection)
        records = [QuotationRecord.from_document(d.get("id"), d) for d in docs]
        self.state.records = sort_records(records)
        self._emit()
        return self.state.records

    async def _process_file(self, file: SelectedFile) -> None:
        extracted_text = ""
        error_msg = ""

        self._set_step(f"Extracting text: {file.name}")
        try:
            extracted_text = await self._router.extract(file)
        except Exception as e:
            error_msg = _message(e, "Extraction failed")
            self._set_error(f"Extraction failed: {file.name}: {error_msg}")
            logger.warning("Extraction failed: %s :: %s", file.name, error_msg)

        self._set_step(f"Uploading: {file.name}")
        try:
            data = await file.read_bytes()
            key = object_key(self._cfg.storage_prefix, file.name, int(self._clock().timestamp() * 1000))
            ref = await asyncio.to_thread(
                self._storage.put, key, data, content_type=file.media_type or None
            )
            url = await asyncio.to_thread(self._storage.resolve_url, ref)
            record = QuotationRecord(
                file_url=url,
                filename=file.name,
                media_type=file.media_type,
                uploaded_at=self._clock().isoformat(),
                extracted_text_summary=summarize_text(extracted_text, self._cfg.summary_chars),
                extraction_error=error_msg or None,
            )
            doc_id = await self._store.insert(self._cfg.collection, record.to_document())
            logger.info("Recorded %s as %s/%s", file.name, self._cfg.collection, doc_id)
        except Exception as e:
            up_err = _message(e, "Upload failed")
            self._set_error(f"Upload failed: {file.name}: {up_err}")
            logger.warning("Upload failed: %s :: %s", file.name, up_err)

    def _set_step(self, step: str) -> None:
        self.state.step = step
        logger.info(step)
        self._emit()

    def _set_error(self, message: str) -> None:
        self.state.error = message
        self._emit()

    def _emit(self) -> None:
        if self._listener is not None:
            self._listener(self.state.snapshot())
