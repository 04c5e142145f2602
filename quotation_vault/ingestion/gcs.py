from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

from google.api_core import exceptions as gexc
from google.cloud import storage

from quotation_vault.ingestion.errors import StorageError


def gs_uri(bucket: str, name: str) -> str:
    return f"gs://{bucket}/{name}"


def object_key(prefix: str, filename: str, epoch_ms: int) -> str:
    """`{prefix}/{filename}_{epoch_ms}`. Same name in the same millisecond collides."""
    return f"{prefix.strip('/')}/{filename}_{epoch_ms}"


@dataclass(frozen=True)
class StoredRef:
    bucket: str
    name: str

    @property
    def uri(self) -> str:
        return gs_uri(self.bucket, self.name)


class ObjectStorage(Protocol):
    def put(self, key: str, data: bytes, *, content_type: str | None = None) -> StoredRef: ...

    def resolve_url(self, ref: StoredRef) -> str: ...


class GcsObjectStorage:
    """Uploads originals to one bucket and hands back a URL a browser can open."""

    def __init__(self, client: storage.Client, bucket: str, *, signed_url_ttl_s: int = 0) -> None:
        self._client = client
        self._bucket = bucket
        self._ttl_s = signed_url_ttl_s

    def put(self, key: str, data: bytes, *, content_type: str | None = None) -> StoredRef:
        blob = self._client.bucket(self._bucket).blob(key)
        try:
            blob.upload_from_string(data, content_type=content_type or "application/octet-stream")
        except gexc.GoogleAPIError as e:
            raise StorageError(str(e) or "Upload failed", {"key": key}) from e
        return StoredRef(bucket=self._bucket, name=key)

    def resolve_url(self, ref: StoredRef) -> str:
        blob = self._client.bucket(ref.bucket).blob(ref.name)
        if self._ttl_s <= 0:
            return blob.public_url
        try:
            return blob.generate_signed_url(
                version="v4",
                expiration=timedelta(seconds=self._ttl_s),
                method="GET",
            )
        except (gexc.GoogleAPIError, AttributeError, ValueError) as e:
            # AttributeError: credentials without a signing key
            raise StorageError(f"Could not resolve URL for {ref.uri}: {e}") from e
