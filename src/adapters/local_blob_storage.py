"""Local blob storage adapter — implements BlobStoragePort on the filesystem.

Files land under LOCAL_MEDIA_PATH; the returned URL is a file:// URI.
"""

from __future__ import annotations

import logging
from pathlib import Path

from src.ports.blob_port import BlobStorageError

logger = logging.getLogger(__name__)


class LocalBlobStorage:
    """Filesystem implementation of BlobStoragePort."""

    def __init__(self, root: str | None = None) -> None:
        if root is None:
            from src.config import settings
            root = settings.LOCAL_MEDIA_PATH
        self._root = Path(root).resolve()

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        target = (self._root / path.lstrip("/")).resolve()
        if self._root not in target.parents:
            raise BlobStorageError(f"Refusing to write outside media root: {path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            logger.error("Writing %s failed: %s", target, exc)
            raise BlobStorageError(f"Failed to store {path}: {exc}") from exc

        logger.info("Stored %s (%d bytes, %s)", target, len(content), content_type)
        return target.as_uri()
