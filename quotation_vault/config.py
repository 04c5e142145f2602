"""Environment-variable-driven configuration for the HTTP service.

Ingestion settings (bucket, collection, timeouts, OCR) live in
`quotation_vault.ingestion.config.IngestConfig`.
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_csv(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# -- Uploads ------------------------------------------------------------------
VAULT_MAX_BODY_BYTES: int = int(os.getenv("VAULT_MAX_BODY_BYTES", str(50 * 1024 * 1024)))
VAULT_UPLOAD_RATE_LIMIT: str = os.getenv("VAULT_UPLOAD_RATE_LIMIT", "10/minute")

# -- CORS ---------------------------------------------------------------------
VAULT_CORS_ALLOW_ORIGINS: list[str] = _env_csv(
    "VAULT_CORS_ALLOW_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
)
VAULT_CORS_ALLOW_METHODS: list[str] = _env_csv(
    "VAULT_CORS_ALLOW_METHODS",
    "GET,POST,OPTIONS",
)
VAULT_CORS_ALLOW_HEADERS: list[str] = _env_csv(
    "VAULT_CORS_ALLOW_HEADERS",
    "Content-Type,X-Request-Id",
)
VAULT_CORS_ALLOW_CREDENTIALS: bool = _env_bool("VAULT_CORS_ALLOW_CREDENTIALS", False)

# -- Server -------------------------------------------------------------------
IS_CLOUD_RUN: bool = bool(os.getenv("K_SERVICE"))
