"""Tests for src.config — settings parsing and required keys."""

import pydantic
import pytest

from src.config import Settings, _load_settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.STORE_PROVIDER == "sqlite"
        assert s.STORE_TIMEOUT_SECONDS == 10.0
        assert s.STORE_RETRIES == 1
        assert s.CHORE_IMAGE_BUCKET == "chore-images"

    def test_normalizes_values(self):
        s = Settings(
            STORE_PROVIDER=" Supabase ",
            SUPABASE_URL="https://proj.supabase.co/",
            STORE_TIMEOUT_SECONDS="2.5",
        )
        assert s.STORE_PROVIDER == "supabase"
        assert s.SUPABASE_URL == "https://proj.supabase.co"
        assert s.STORE_TIMEOUT_SECONDS == 2.5

    def test_negative_retries_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            Settings(STORE_RETRIES=-1)


class TestLoadSettings:
    def test_supabase_without_url_exits(self, monkeypatch):
        monkeypatch.setenv("STORE_PROVIDER", "supabase")
        monkeypatch.setenv("SUPABASE_URL", "")
        monkeypatch.setenv("SUPABASE_KEY", "key")
        with pytest.raises(SystemExit):
            _load_settings()

    def test_supabase_blobs_without_key_exits(self, monkeypatch):
        monkeypatch.setenv("BLOB_PROVIDER", "supabase")
        monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co")
        monkeypatch.setenv("SUPABASE_KEY", "")
        with pytest.raises(SystemExit):
            _load_settings()

    def test_local_providers_need_no_keys(self, monkeypatch):
        monkeypatch.setenv("STORE_PROVIDER", "sqlite")
        monkeypatch.setenv("BLOB_PROVIDER", "local")
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        s = _load_settings()
        assert s.STORE_PROVIDER == "sqlite"
