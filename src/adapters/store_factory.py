"""Adapter factories — create the right store and blob storage based on config."""

from __future__ import annotations

from src.config import settings
from src.ports.blob_port import BlobStoragePort
from src.ports.store_port import StorePort


def create_store() -> StorePort:
    """Return the store adapter matching the STORE_PROVIDER setting."""
    provider = settings.STORE_PROVIDER.lower()

    if provider == "sqlite":
        from src.data.db import SQLiteStore

        return SQLiteStore(db_path=settings.DATABASE_PATH)

    if provider == "supabase":
        from src.adapters.supabase_store import SupabaseStore

        return SupabaseStore(
            url=settings.SUPABASE_URL,
            key=settings.SUPABASE_KEY,
            timeout=settings.STORE_TIMEOUT_SECONDS,
        )

    raise ValueError(f"Unknown STORE_PROVIDER: {provider!r}")


def create_blob_storage() -> BlobStoragePort:
    """Return the blob storage adapter matching the BLOB_PROVIDER setting."""
    provider = settings.BLOB_PROVIDER.lower()

    if provider == "local":
        from src.adapters.local_blob_storage import LocalBlobStorage

        return LocalBlobStorage(root=settings.LOCAL_MEDIA_PATH)

    if provider == "supabase":
        from src.adapters.supabase_blob_storage import SupabaseBlobStorage

        return SupabaseBlobStorage(
            url=settings.SUPABASE_URL,
            key=settings.SUPABASE_KEY,
            bucket=settings.CHORE_IMAGE_BUCKET,
        )

    raise ValueError(f"Unknown BLOB_PROVIDER: {provider!r}")
