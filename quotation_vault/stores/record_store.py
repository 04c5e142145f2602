"""Document-collection storage for quotation records.

Each record is one JSONB row in `vault_documents`, keyed by collection
name. Rows are append-only: nothing here updates or deletes.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol

import asyncpg

from quotation_vault.db import connection
from quotation_vault.ingestion.errors import PersistenceError

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], AbstractAsyncContextManager[asyncpg.Connection]]


class RecordStore(Protocol):
    async def insert(self, collection: str, record: dict[str, Any]) -> str: ...

    async def list_all(self, collection: str) -> list[dict[str, Any]]: ...


class PostgresRecordStore:
    """Stateless data-access object for vault_documents."""

    def __init__(self, connect: ConnectionFactory = connection) -> None:
        self._connect = connect

    async def insert(self, collection: str, record: dict[str, Any]) -> str:
        """Store one document and return its generated id."""
        doc_id = str(uuid.uuid4())
        try:
            async with self._connect() as conn:
                await conn.execute(
                    """
                    INSERT INTO vault_documents (id, collection, data)
                    VALUES ($1::uuid, $2, $3::jsonb)
                    """,
                    doc_id,
                    collection,
                    record,
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise PersistenceError(str(e) or type(e).__name__, {"collection": collection}) from e
        logger.debug("Inserted %s/%s", collection, doc_id)
        return doc_id

    async def list_all(self, collection: str) -> list[dict[str, Any]]:
        """Return every document in a collection as `{"id": ..., **data}`.

        Order is unspecified; callers sort.
        """
        try:
            async with self._connect() as conn:
                rows = await conn.fetch(
                    "SELECT id, data FROM vault_documents WHERE collection = $1",
                    collection,
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise PersistenceError(str(e) or type(e).__name__, {"collection": collection}) from e
        return [{**(r["data"] or {}), "id": str(r["id"])} for r in rows]
