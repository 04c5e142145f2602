from __future__ import annotations

import argparse


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="quotation-vault-ingest",
        description="Extract text from local quotation files, upload them to GCS and record them",
    )

    p.add_argument("files", nargs="*", help="Files to upload, processed in the given order")
    p.add_argument(
        "--list",
        action="store_true",
        help="Print stored quotations and exit (no upload)",
    )
    p.add_argument(
        "--timeout",
        type=int,
        default=0,
        help="Override VAULT_EXTRACT_TIMEOUT_MS (milliseconds)",
    )
    p.add_argument("--no-ocr", action="store_true", help="Skip Document AI OCR for images")
    p.add_argument("--log-level", default="INFO", help="Python logging level (INFO, DEBUG, ...)")
    return p
