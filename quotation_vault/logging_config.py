"""Logging setup: JSON on Cloud Run, plain text locally.

Log records carry the current request id (if any) so upload batches can
be traced across the sequencer's per-file log lines.
"""

from __future__ import annotations

import contextvars
import logging
import os
import uuid

from pythonjsonlogger.json import JsonFormatter

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")


class GCPJsonFormatter(JsonFormatter):
    """JSON formatter that emits Cloud Logging `severity` instead of `levelname`."""

    def add_fields(
        self,
        log_record: dict[str, object],
        record: logging.LogRecord,
        message_dict: dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["severity"] = record.levelname
        log_record.pop("levelname", None)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def _use_json() -> bool:
    fmt = os.getenv("VAULT_LOG_FORMAT", "").strip().lower()
    if fmt in ("json", "text"):
        return fmt == "json"
    return bool(os.getenv("K_SERVICE") or os.getenv("CLOUD_RUN_JOB"))


def setup_logging(*, level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if _use_json():
        handler.setFormatter(GCPJsonFormatter(
            fmt="%(message)s %(name)s %(funcName)s %(lineno)d %(request_id)s",
            rename_fields={"name": "logger"},
        ))
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s [%(request_id)s]  %(message)s",
            datefmt="%H:%M:%S",
        ))

    root.addHandler(handler)

    # google-auth and urllib3 are noisy at DEBUG
    for name in ("google.auth", "urllib3"):
        logging.getLogger(name).setLevel(max(root.level, logging.INFO))


def generate_request_id() -> str:
    """Generate a unique request ID for trace correlation."""
    return uuid.uuid4().hex[:16]
