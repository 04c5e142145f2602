from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Sequence
from datetime import datetime

from google.cloud.storage import Client

from quotation_vault.db import close_pool
from quotation_vault.ingestion.cli import build_parser
from quotation_vault.ingestion.config import IngestConfig
from quotation_vault.ingestion.extractors.router import ExtractionRouter
from quotation_vault.ingestion.gcs import GcsObjectStorage
from quotation_vault.ingestion.planner import collect_files
from quotation_vault.ingestion.sequencer import IngestionSequencer
from quotation_vault.ingestion.types import QuotationRecord
from quotation_vault.logging_config import setup_logging
from quotation_vault.stores.record_store import PostgresRecordStore


def summary_preview(text: str) -> str:
    """First two lines of the summary, joined by a space."""
    if not text:
        return "-"
    return " ".join(text.split("\n")[:2])


def _local_time(iso: str) -> str:
    try:
        return datetime.fromisoformat(iso).astimezone().strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return iso


def format_records(records: Sequence[QuotationRecord]) -> str:
    if not records:
        return "No quotations uploaded yet."
    lines = ["Filename\tFile type\tDate\tLink\tExtracted Text (summary)"]
    for r in records:
        link = r.file_url
        if r.extraction_error:
            link = f"{link} ({r.extraction_error})"
        lines.append(
            "\t".join([r.filename, r.media_type, _local_time(r.uploaded_at), link, summary_preview(r.extracted_text_summary)])
        )
    return "\n".join(lines)


async def _amain() -> int:
    parser = build_parser()
    args = parser.parse_args()

    setup_logging(level=args.log_level.upper())
    logger = logging.getLogger("quotation_vault.ingestion")

    cfg = IngestConfig.from_env()
    # CLI overrides
    if args.timeout and args.timeout > 0:
        cfg = dataclasses.replace(cfg, extract_timeout_ms=args.timeout)
    if args.no_ocr:
        cfg = dataclasses.replace(cfg, ocr_enabled=False)
    cfg.validate()

    sequencer = IngestionSequencer(
        cfg=cfg,
        router=ExtractionRouter.from_config(cfg),
        storage=GcsObjectStorage(Client(), cfg.storage_bucket, signed_url_ttl_s=cfg.signed_url_ttl_s),
        store=PostgresRecordStore(),
    )

    try:
        if args.list or not args.files:
            if not args.list:
                logger.warning("No files given; listing stored quotations")
            await sequencer.refresh()
        else:
            batch = collect_files(args.files)
            await sequencer.run(batch)
    finally:
        await close_pool()

    print(format_records(sequencer.state.records))
    if sequencer.state.error:
        logger.error("%s", sequencer.state.error)
        return 2
    return 0


def main() -> None:
    raise SystemExit(asyncio.run(_amain()))


if __name__ == "__main__":
    main()
