"""Unit tests for FastAPI endpoints in the quotation vault.

Tests cover:
- POST /v1/uploads (batch run, upload failure banner, busy 409, missing files)
- GET /v1/uploads/status
- GET /v1/quotations (sorted list, 503 on database failure)
- GET /liveness and GET /readiness
- Body size middleware (oversized content-length returns 413)
- Request ID middleware (echo and auto-generate)

Uses httpx.AsyncClient with ASGITransport. The sequencer is wired to
in-memory storage and record store doubles; no GCP or database access.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from quotation_vault.ingestion.extractors.image import ImageExtractor
from quotation_vault.ingestion.extractors.pdf import PDF_PLACEHOLDER, PdfExtractor
from quotation_vault.ingestion.extractors.router import ExtractionRouter
from quotation_vault.ingestion.extractors.text import TextExtractor
from quotation_vault.ingestion.sequencer import IngestionSequencer

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sequencer(ingest_cfg, storage, record_store, clock) -> IngestionSequencer:
    docai = MagicMock()
    docai.ocr_online.return_value = ("Invoice #1", {"pages": 1})
    router = ExtractionRouter([ImageExtractor(docai=docai), PdfExtractor(), TextExtractor()])
    return IngestionSequencer(
        cfg=ingest_cfg,
        router=router,
        storage=storage,
        store=record_store,
        clock=clock,
    )


@pytest.fixture()
async def client(sequencer):
    """Async httpx client wired to the FastAPI app with the test sequencer."""
    from quotation_vault.app import app

    app.state.limiter.reset()
    app.state.sequencer = sequencer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    del app.state.sequencer


def _files(*items: tuple[str, bytes, str]) -> list[tuple[str, tuple[str, bytes, str]]]:
    return [("files", item) for item in items]


# ---------------------------------------------------------------------------
# Health endpoints
# ---------------------------------------------------------------------------


class TestHealth:
    async def test_liveness_returns_ok(self, client: AsyncClient):
        resp = await client.get("/liveness")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    @patch("quotation_vault.app.check_db_connection", new_callable=AsyncMock, return_value=True)
    async def test_readiness_ok(self, mock_db, client: AsyncClient):
        resp = await client.get("/readiness")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    @patch("quotation_vault.app.check_db_connection", new_callable=AsyncMock, return_value=False)
    async def test_readiness_db_down(self, mock_db, client: AsyncClient):
        resp = await client.get("/readiness")
        assert resp.status_code == 503
        assert "Database unavailable" in resp.json()["detail"]


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------


class TestUpload:
    async def test_batch_creates_records(self, client: AsyncClient, record_store):
        resp = await client.post(
            "/v1/uploads",
            files=_files(("image.png", b"png", "image/png"), ("doc.pdf", b"%PDF", "application/pdf")),
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"]["processing"] is False
        assert body["status"]["progress"] == 100
        assert body["status"]["step"] == ""
        assert body["status"]["error"] is None
        summaries = {q["filename"]: q["extracted_text_summary"] for q in body["quotations"]}
        assert summaries == {"image.png": "Invoice #1", "doc.pdf": PDF_PLACEHOLDER}
        # newest first: doc.pdf was processed second
        assert [q["filename"] for q in body["quotations"]] == ["doc.pdf", "image.png"]
        assert len(record_store.records()) == 2

    async def test_upload_failure_reported(self, client: AsyncClient, storage):
        storage.fail_names.add("b.txt")
        resp = await client.post(
            "/v1/uploads",
            files=_files(("a.txt", b"alpha", "text/plain"), ("b.txt", b"beta", "text/plain")),
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"]["error"].startswith("Upload failed: b.txt: ")
        assert [q["filename"] for q in body["quotations"]] == ["a.txt"]

    async def test_extraction_error_visible_on_row(self, client: AsyncClient, sequencer):
        sequencer._router = ExtractionRouter([ImageExtractor(docai=None)])
        resp = await client.post("/v1/uploads", files=_files(("scan.png", b"png", "image/png")))

        [row] = resp.json()["quotations"]
        assert row["extraction_error"] == "OCR engine not configured"
        assert row["extracted_text_summary"] == ""

    async def test_busy_returns_409(self, client: AsyncClient, sequencer):
        sequencer.state.processing = True
        resp = await client.post("/v1/uploads", files=_files(("a.txt", b"a", "text/plain")))
        assert resp.status_code == 409

    async def test_missing_files_rejected(self, client: AsyncClient):
        resp = await client.post("/v1/uploads", data={"note": "nothing attached"})
        assert resp.status_code == 422

    async def test_status_idle(self, client: AsyncClient):
        resp = await client.get("/v1/uploads/status")
        assert resp.status_code == 200
        assert resp.json() == {"processing": False, "progress": 0, "step": "", "error": None, "selected": []}

    async def test_status_reflects_running_batch(self, client: AsyncClient, sequencer):
        sequencer.state.processing = True
        sequencer.state.progress = 50
        sequencer.state.step = "Uploading: a.txt"
        resp = await client.get("/v1/uploads/status")
        body = resp.json()
        assert body["processing"] is True
        assert body["progress"] == 50
        assert body["step"] == "Uploading: a.txt"


# ---------------------------------------------------------------------------
# Quotations
# ---------------------------------------------------------------------------


class TestQuotations:
    async def test_empty(self, client: AsyncClient):
        resp = await client.get("/v1/quotations")
        assert resp.status_code == 200
        assert resp.json() == {"quotations": [], "total": 0}

    async def test_sorted_newest_first(self, client: AsyncClient, record_store):
        for name, ts in (("a.pdf", "2026-01-01T00:00:00+00:00"), ("b.pdf", "2026-03-01T00:00:00+00:00")):
            await record_store.insert(
                "quotations",
                {
                    "file_url": f"https://x/{name}",
                    "filename": name,
                    "media_type": "application/pdf",
                    "uploaded_at": ts,
                    "extracted_text_summary": PDF_PLACEHOLDER,
                },
            )

        resp = await client.get("/v1/quotations")
        body = resp.json()
        assert body["total"] == 2
        assert [q["filename"] for q in body["quotations"]] == ["b.pdf", "a.pdf"]
        assert all(q["id"] for q in body["quotations"])

    async def test_overlong_stored_summary_truncated(self, client: AsyncClient, record_store):
        await record_store.insert(
            "quotations",
            {
                "file_url": "https://x/legacy.txt",
                "filename": "legacy.txt",
                "media_type": "text/plain",
                "uploaded_at": "2026-01-01T00:00:00+00:00",
                "extracted_text_summary": "y" * 900,
            },
        )

        resp = await client.get("/v1/quotations")
        assert resp.status_code == 200
        assert resp.json()["quotations"][0]["extracted_text_summary"] == "y" * 600

    async def test_database_failure_returns_503(self, client: AsyncClient, record_store):
        record_store.fail_list = True
        resp = await client.get("/v1/quotations")
        assert resp.status_code == 503


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


class TestMiddleware:
    async def test_request_id_echoed(self, client: AsyncClient):
        resp = await client.get("/liveness", headers={"x-request-id": "abc123"})
        assert resp.headers["x-request-id"] == "abc123"

    async def test_request_id_generated(self, client: AsyncClient):
        resp = await client.get("/liveness")
        assert len(resp.headers["x-request-id"]) == 16

    async def test_oversized_body_rejected(self, client: AsyncClient):
        with patch("quotation_vault.app.VAULT_MAX_BODY_BYTES", 10):
            resp = await client.post("/v1/uploads", files=_files(("a.txt", b"x" * 100, "text/plain")))
        assert resp.status_code == 413

    async def test_uninitialized_service_returns_503(self, client: AsyncClient):
        from quotation_vault.app import app

        seq = app.state.sequencer
        app.state.sequencer = None
        try:
            resp = await client.get("/v1/quotations")
        finally:
            app.state.sequencer = seq
        assert resp.status_code == 503
