"""FastAPI entry point for the quotation vault.

Endpoints:
- POST /v1/uploads        - Run one upload batch (multipart `files`)
- GET  /v1/uploads/status - Live progress of the running batch
- GET  /v1/quotations     - All records, newest first
- GET  /liveness          - Health check
- GET  /readiness         - DB connectivity check
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, cast

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from google.cloud.storage import Client
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from quotation_vault.config import (
    VAULT_CORS_ALLOW_CREDENTIALS,
    VAULT_CORS_ALLOW_HEADERS,
    VAULT_CORS_ALLOW_METHODS,
    VAULT_CORS_ALLOW_ORIGINS,
    VAULT_MAX_BODY_BYTES,
    VAULT_UPLOAD_RATE_LIMIT,
)
from quotation_vault.db import check_db_connection, close_pool, get_pool
from quotation_vault.ingestion.config import IngestConfig
from quotation_vault.ingestion.errors import PersistenceError
from quotation_vault.ingestion.extractors.router import ExtractionRouter
from quotation_vault.ingestion.gcs import GcsObjectStorage
from quotation_vault.ingestion.sequencer import IngestionSequencer
from quotation_vault.ingestion.types import SelectedFile
from quotation_vault.logging_config import generate_request_id, request_id_var, setup_logging
from quotation_vault.models import (
    HealthResponse,
    QuotationListResponse,
    QuotationOut,
    UploadResponse,
    UploadStatus,
)
from quotation_vault.stores.record_store import PostgresRecordStore

logger = logging.getLogger(__name__)


def build_sequencer() -> IngestionSequencer:
    cfg = IngestConfig.from_env()
    cfg.validate()
    return IngestionSequencer(
        cfg=cfg,
        router=ExtractionRouter.from_config(cfg),
        storage=GcsObjectStorage(Client(), cfg.storage_bucket, signed_url_ttl_s=cfg.signed_url_ttl_s),
        store=PostgresRecordStore(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: init pool and sequencer, load the record list once."""
    setup_logging()
    await get_pool()
    app.state.sequencer = build_sequencer()
    try:
        await app.state.sequencer.refresh()
    except PersistenceError as e:
        logger.warning("Initial record load failed: %s", e)
    logger.info("Quotation vault started")
    yield
    await close_pool()
    logger.info("Quotation vault stopped")


app = FastAPI(
    title="Quotation Vault API",
    version="0.1.0",
    lifespan=lifespan,
)

# -- Rate limiting ------------------------------------------------------------

limiter = Limiter(key_func=get_remote_address, default_limits=["120/minute"])
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded"})


if VAULT_CORS_ALLOW_CREDENTIALS and "*" in VAULT_CORS_ALLOW_ORIGINS:
    raise RuntimeError("Invalid CORS config: wildcard origin cannot be combined with credentials=true")

app.add_middleware(
    CORSMiddleware,
    allow_origins=VAULT_CORS_ALLOW_ORIGINS,
    allow_credentials=VAULT_CORS_ALLOW_CREDENTIALS,
    allow_methods=VAULT_CORS_ALLOW_METHODS,
    allow_headers=VAULT_CORS_ALLOW_HEADERS,
)


# -- Body size limit ----------------------------------------------------------


@app.middleware("http")
async def body_size_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with bodies exceeding the size limit."""
    content_length = request.headers.get("content-length")
    if content_length is not None and int(content_length) > VAULT_MAX_BODY_BYTES:
        return JSONResponse(status_code=413, content={"detail": "Request body too large"})
    return await call_next(request)


# -- Request ID middleware ----------------------------------------------------


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Attach a unique request ID for trace correlation."""
    request_id = request.headers.get("x-request-id") or generate_request_id()
    request.state.request_id = request_id
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["x-request-id"] = request_id
    return response


def _get_sequencer(request: Request) -> IngestionSequencer:
    """Dependency: the process-wide sequencer built at startup."""
    seq = getattr(request.app.state, "sequencer", None)
    if seq is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return cast(IngestionSequencer, seq)


# -- Health -------------------------------------------------------------------


@app.get("/liveness", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    return HealthResponse(status="ok")


@app.get("/readiness", response_model=HealthResponse)
async def readiness() -> HealthResponse:
    db_ok = await check_db_connection()
    if not db_ok:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return HealthResponse(status="ok")


# -- Quotations ---------------------------------------------------------------


@app.get("/v1/quotations", response_model=QuotationListResponse)
async def list_quotations(
    seq: Annotated[IngestionSequencer, Depends(_get_sequencer)],
) -> QuotationListResponse:
    """Full re-query of the collection, newest upload first."""
    try:
        records = await seq.refresh()
    except PersistenceError as e:
        logger.exception("Failed to list quotations")
        raise HTTPException(status_code=503, detail="Database unavailable") from e
    return QuotationListResponse(
        quotations=[QuotationOut.from_record(r) for r in records],
        total=len(records),
    )


# -- Uploads ------------------------------------------------------------------


@app.get("/v1/uploads/status", response_model=UploadStatus)
async def upload_status(
    seq: Annotated[IngestionSequencer, Depends(_get_sequencer)],
) -> UploadStatus:
    return UploadStatus.from_state(seq.state)


@app.post("/v1/uploads", response_model=UploadResponse)
@limiter.limit(VAULT_UPLOAD_RATE_LIMIT)
async def upload(
    request: Request,
    seq: Annotated[IngestionSequencer, Depends(_get_sequencer)],
    files: Annotated[list[UploadFile], File(description="Files in selection order")],
) -> UploadResponse:
    """Run one batch: extract -> upload -> record, per file, in order."""
    if not files:
        raise HTTPException(status_code=400, detail="No files selected")
    if seq.busy:
        raise HTTPException(status_code=409, detail="An upload batch is already running")

    batch = []
    for f in files:
        data = await f.read()
        batch.append(
            SelectedFile(
                name=f.filename or "upload",
                media_type=f.content_type or "",
                source=data,
            )
        )

    try:
        await seq.run(batch)
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return UploadResponse(
        status=UploadStatus.from_state(seq.state),
        quotations=[QuotationOut.from_record(r) for r in seq.state.records],
    )
