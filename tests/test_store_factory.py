"""Tests for the store and blob storage adapter factories."""

import pytest
from unittest.mock import patch

from src.adapters.store_factory import create_blob_storage, create_store


class TestCreateStore:
    @patch("src.adapters.store_factory.settings")
    def test_returns_sqlite_store(self, mock_settings, tmp_db_path):
        mock_settings.STORE_PROVIDER = "sqlite"
        mock_settings.DATABASE_PATH = tmp_db_path
        store = create_store()
        from src.data.db import SQLiteStore
        assert isinstance(store, SQLiteStore)

    @patch("src.adapters.store_factory.settings")
    def test_returns_supabase_store(self, mock_settings):
        mock_settings.STORE_PROVIDER = "supabase"
        mock_settings.SUPABASE_URL = "https://proj.supabase.co"
        mock_settings.SUPABASE_KEY = "key"
        mock_settings.STORE_TIMEOUT_SECONDS = 5.0
        store = create_store()
        from src.adapters.supabase_store import SupabaseStore
        assert isinstance(store, SupabaseStore)

    @patch("src.adapters.store_factory.settings")
    def test_case_insensitive(self, mock_settings, tmp_db_path):
        mock_settings.STORE_PROVIDER = "SQLite"
        mock_settings.DATABASE_PATH = tmp_db_path
        from src.data.db import SQLiteStore
        assert isinstance(create_store(), SQLiteStore)

    @patch("src.adapters.store_factory.settings")
    def test_unknown_provider_raises(self, mock_settings):
        mock_settings.STORE_PROVIDER = "mongo"
        with pytest.raises(ValueError, match="Unknown STORE_PROVIDER"):
            create_store()


class TestCreateBlobStorage:
    @patch("src.adapters.store_factory.settings")
    def test_returns_local_storage(self, mock_settings, tmp_path):
        mock_settings.BLOB_PROVIDER = "local"
        mock_settings.LOCAL_MEDIA_PATH = str(tmp_path)
        from src.adapters.local_blob_storage import LocalBlobStorage
        assert isinstance(create_blob_storage(), LocalBlobStorage)

    @patch("src.adapters.store_factory.settings")
    def test_returns_supabase_storage(self, mock_settings):
        mock_settings.BLOB_PROVIDER = "supabase"
        mock_settings.SUPABASE_URL = "https://proj.supabase.co"
        mock_settings.SUPABASE_KEY = "key"
        mock_settings.CHORE_IMAGE_BUCKET = "chore-images"
        from src.adapters.supabase_blob_storage import SupabaseBlobStorage
        assert isinstance(create_blob_storage(), SupabaseBlobStorage)

    @patch("src.adapters.store_factory.settings")
    def test_unknown_provider_raises(self, mock_settings):
        mock_settings.BLOB_PROVIDER = "s3"
        with pytest.raises(ValueError, match="Unknown BLOB_PROVIDER"):
            create_blob_storage()
