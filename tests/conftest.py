"""Shared test fixtures: in-memory stand-ins for GCS, the record store and the clock."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from quotation_vault.ingestion.config import IngestConfig
from quotation_vault.ingestion.errors import PersistenceError, StorageError
from quotation_vault.ingestion.gcs import StoredRef


class FakeStorage:
    """Object storage double. Filenames in `fail_names` fail on put."""

    def __init__(self, bucket: str = "test-bucket") -> None:
        self.bucket = bucket
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str | None] = {}
        self.fail_names: set[str] = set()

    def put(self, key: str, data: bytes, *, content_type: str | None = None) -> StoredRef:
        filename = key.split("/", 1)[-1].rsplit("_", 1)[0]
        if filename in self.fail_names:
            raise StorageError("bucket unavailable")
        self.objects[key] = data
        self.content_types[key] = content_type
        return StoredRef(bucket=self.bucket, name=key)

    def resolve_url(self, ref: StoredRef) -> str:
        return f"https://storage.example.com/{ref.bucket}/{ref.name}"


class FakeRecordStore:
    """Document store double keeping collections in dicts."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.fail_insert = False
        self.fail_list = False

    async def insert(self, collection: str, record: dict[str, Any]) -> str:
        if self.fail_insert:
            raise PersistenceError("write rejected")
        doc_id = uuid.uuid4().hex
        self.collections.setdefault(collection, {})[doc_id] = dict(record)
        return doc_id

    async def list_all(self, collection: str) -> list[dict[str, Any]]:
        if self.fail_list:
            raise PersistenceError("read rejected")
        docs = self.collections.get(collection, {})
        return [{**data, "id": doc_id} for doc_id, data in docs.items()]

    def records(self, collection: str = "quotations") -> list[dict[str, Any]]:
        return list(self.collections.get(collection, {}).values())


class FakeClock:
    """Advances one second per call so every timestamp is distinct."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 15, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


def make_config(**overrides: Any) -> IngestConfig:
    values: dict[str, Any] = {
        "storage_bucket": "test-bucket",
        "storage_prefix": "quotations",
        "signed_url_ttl_s": 0,
        "collection": "quotations",
        "extract_timeout_ms": 10_000,
        "summary_chars": 600,
        "ocr_enabled": False,
        "docai_project": None,
        "docai_location": None,
        "docai_processor_id": None,
        "ocr_language": "en",
    }
    values.update(overrides)
    return IngestConfig(**values)


@pytest.fixture
def ingest_cfg() -> IngestConfig:
    return make_config()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def record_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_cfg():
    """Factory for IngestConfig with test defaults; pass overrides as kwargs."""
    return make_config
