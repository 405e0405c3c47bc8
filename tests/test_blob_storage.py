"""Tests for the blob storage adapters (local filesystem and Supabase Storage)."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from src.adapters.local_blob_storage import LocalBlobStorage
from src.adapters.supabase_blob_storage import SupabaseBlobStorage
from src.ports.blob_port import BlobStorageError


class TestLocalBlobStorage:
    @pytest.mark.asyncio
    async def test_upload_writes_file(self, tmp_path):
        storage = LocalBlobStorage(root=str(tmp_path))
        url = await storage.upload("chores/c1/1.jpg", b"jpeg-bytes", "image/jpeg")
        assert (tmp_path / "chores" / "c1" / "1.jpg").read_bytes() == b"jpeg-bytes"
        assert url.startswith("file://")
        assert url.endswith("chores/c1/1.jpg")

    @pytest.mark.asyncio
    async def test_refuses_path_outside_root(self, tmp_path):
        storage = LocalBlobStorage(root=str(tmp_path / "media"))
        with pytest.raises(BlobStorageError):
            await storage.upload("../escape.jpg", b"x", "image/jpeg")


class TestSupabaseBlobStorage:
    def _client(self, upload_error=None):
        bucket = MagicMock()
        bucket.upload = AsyncMock(side_effect=upload_error)
        bucket.get_public_url = AsyncMock(
            return_value="https://proj.supabase.co/storage/v1/object/public/chore-images/chores/c1/1.png"
        )
        client = MagicMock()
        client.storage.from_.return_value = bucket
        return client, bucket

    @pytest.mark.asyncio
    async def test_upload_returns_public_url(self):
        client, bucket = self._client()
        storage = SupabaseBlobStorage("https://proj.supabase.co", "key", "chore-images")

        with patch(
            "src.adapters.supabase_blob_storage.acreate_client", AsyncMock(return_value=client),
        ):
            url = await storage.upload("/chores/c1/1.png", b"png", "image/png")

        assert url == "https://proj.supabase.co/storage/v1/object/public/chore-images/chores/c1/1.png"
        client.storage.from_.assert_called_with("chore-images")
        path, content, options = bucket.upload.call_args.args
        assert path == "chores/c1/1.png"
        assert content == b"png"
        assert options == {"content-type": "image/png", "upsert": "true"}
        bucket.get_public_url.assert_awaited_once_with("chores/c1/1.png")

    @pytest.mark.asyncio
    async def test_storage_error_wrapped(self):
        client, bucket = self._client(upload_error=RuntimeError("403 Forbidden"))
        storage = SupabaseBlobStorage("https://proj.supabase.co", "key", "chore-images")

        with patch(
            "src.adapters.supabase_blob_storage.acreate_client", AsyncMock(return_value=client),
        ):
            with pytest.raises(BlobStorageError):
                await storage.upload("chores/c1/1.png", b"png", "image/png")
        bucket.get_public_url.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_network_error_wrapped(self):
        client, _ = self._client(upload_error=httpx.ConnectError("refused"))
        storage = SupabaseBlobStorage("https://proj.supabase.co", "key", "chore-images")
        with patch(
            "src.adapters.supabase_blob_storage.acreate_client", AsyncMock(return_value=client),
        ):
            with pytest.raises(BlobStorageError):
                await storage.upload("chores/c1/1.png", b"png", "image/png")

    @pytest.mark.asyncio
    async def test_client_creation_failure_wrapped(self):
        storage = SupabaseBlobStorage("https://proj.supabase.co", "key", "chore-images")
        with patch(
            "src.adapters.supabase_blob_storage.acreate_client",
            AsyncMock(side_effect=httpx.ConnectError("refused")),
        ):
            with pytest.raises(BlobStorageError):
                await storage.upload("chores/c1/1.png", b"png", "image/png")
