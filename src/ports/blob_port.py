"""Blob storage port — abstract interface for storing proof-of-completion images.

Core modules depend on this protocol, never on a specific provider.
"""

from __future__ import annotations

from typing import Protocol


class BlobStorageError(Exception):
    """Raised when any blob storage operation fails."""


class BlobStoragePort(Protocol):
    """Abstract blob storage interface used by core modules."""

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store ``content`` under ``path`` and return a retrievable URL."""
        ...
