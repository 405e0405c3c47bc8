"""Supabase Storage adapter — implements BlobStoragePort.

Uploads proof images to a public bucket and returns their public URL.
"""

from __future__ import annotations

import logging

from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from src.ports.blob_port import BlobStorageError

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 30


class SupabaseBlobStorage:
    """Supabase Storage implementation of BlobStoragePort."""

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        bucket: str | None = None,
    ) -> None:
        if url is None or key is None or bucket is None:
            from src.config import settings

            url = settings.SUPABASE_URL if url is None else url
            key = settings.SUPABASE_KEY if key is None else key
            bucket = settings.CHORE_IMAGE_BUCKET if bucket is None else bucket
        self._url = url.rstrip("/")
        self._key = key
        self._bucket = bucket
        self._client: AsyncClient | None = None

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            self._client = await acreate_client(
                self._url,
                self._key,
                options=AsyncClientOptions(storage_client_timeout=_TIMEOUT_SECONDS),
            )
        return self._client

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        path = path.lstrip("/")
        try:
            client = await self._get_client()
            bucket = client.storage.from_(self._bucket)
            await bucket.upload(
                path,
                content,
                {"content-type": content_type, "upsert": "true"},
            )
            url = await bucket.get_public_url(path)
        except Exception as exc:
            logger.error("Supabase Storage upload of %s failed: %s", path, exc)
            raise BlobStorageError(f"Failed to upload {path}: {exc}") from exc

        logger.info("Uploaded %s (%d bytes) to %s", path, len(content), self._bucket)
        return url
