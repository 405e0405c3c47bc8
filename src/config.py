"""
Household Chores — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Backing store: "sqlite" | "supabase"
    STORE_PROVIDER: str = "sqlite"

    # SQLite (only needed when STORE_PROVIDER=sqlite)
    DATABASE_PATH: str = "data/household.db"

    # Supabase project (only needed when STORE_PROVIDER or BLOB_PROVIDER is supabase)
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    # Proof-of-completion images: "local" | "supabase"
    BLOB_PROVIDER: str = "local"
    CHORE_IMAGE_BUCKET: str = "chore-images"
    LOCAL_MEDIA_PATH: str = "data/media"

    # Store call policy
    STORE_TIMEOUT_SECONDS: float = 10.0
    STORE_RETRIES: int = 1

    @field_validator("STORE_PROVIDER", "BLOB_PROVIDER", mode="before")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        return str(v).strip().lower()

    @field_validator("SUPABASE_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return str(v).strip().rstrip("/")

    @field_validator("STORE_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def parse_timeout(cls, v: str | float) -> float:
        return float(v)

    @field_validator("STORE_RETRIES", mode="before")
    @classmethod
    def parse_retries(cls, v: str | int) -> int:
        retries = int(v)
        if retries < 0:
            raise ValueError("STORE_RETRIES must be >= 0")
        return retries


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    store_provider = os.getenv("STORE_PROVIDER", "sqlite").strip().lower()
    blob_provider = os.getenv("BLOB_PROVIDER", "local").strip().lower()
    supabase_url = os.getenv("SUPABASE_URL", "")
    supabase_key = os.getenv("SUPABASE_KEY", "")

    if "supabase" in (store_provider, blob_provider):
        if not supabase_url or supabase_url.startswith("your-"):
            print("ERROR: SUPABASE_URL is missing or not set in .env", file=sys.stderr)
            sys.exit(1)
        if not supabase_key or supabase_key.startswith("your-"):
            print("ERROR: SUPABASE_KEY is missing or not set in .env", file=sys.stderr)
            sys.exit(1)

    return Settings(
        STORE_PROVIDER=store_provider,
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/household.db"),
        SUPABASE_URL=supabase_url,
        SUPABASE_KEY=supabase_key,
        BLOB_PROVIDER=blob_provider,
        CHORE_IMAGE_BUCKET=os.getenv("CHORE_IMAGE_BUCKET", "chore-images"),
        LOCAL_MEDIA_PATH=os.getenv("LOCAL_MEDIA_PATH", "data/media"),
        STORE_TIMEOUT_SECONDS=os.getenv("STORE_TIMEOUT_SECONDS", "10"),
        STORE_RETRIES=os.getenv("STORE_RETRIES", "1"),
    )


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
