"""
Blob storage - durable file storage that hands back public URLs.
Challenge: Keep the upload path swappable (local disk now, object storage later).
Design: Single instance behind a FastAPI dependency; tests override it with a temp dir.
"""

import logging
import secrets
import time
from pathlib import Path, PurePosixPath

from starlette.concurrency import run_in_threadpool

from cityshare.config import get_settings
from cityshare.core.exceptions import InvalidInput

logger = logging.getLogger(__name__)

settings = get_settings()


class BlobStorage:
    """Interface: store bytes under a folder, return a public URL."""

    async def upload(
        self, data: bytes, filename: str, content_type: str, folder: str | None = None
    ) -> str:
        raise NotImplementedError


def _safe_folder(folder: str | None) -> PurePosixPath:
    """Relative folder inside the bucket; traversal and absolute paths are rejected."""
    if not folder or not folder.strip():
        return PurePosixPath()
    path = PurePosixPath(folder.strip().strip("/"))
    if path.is_absolute() or any(part in ("..", ".") for part in path.parts):
        raise InvalidInput(f"Invalid folder: {folder}")
    return path


def _unique_name(filename: str) -> str:
    ext = PurePosixPath(filename or "").suffix.lstrip(".").lower() or "bin"
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}"


class LocalBlobStorage(BlobStorage):
    """Writes files under root/bucket/...; the app serves root at url_prefix."""

    def __init__(self, root: str | Path, url_prefix: str, bucket: str, base_url: str = ""):
        self.root = Path(root)
        self.url_prefix = "/" + url_prefix.strip("/")
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")

    def _public_url(self, relative: PurePosixPath) -> str:
        return f"{self.base_url}{self.url_prefix}/{relative.as_posix()}"

    async def upload(
        self, data: bytes, filename: str, content_type: str, folder: str | None = None
    ) -> str:
        relative = PurePosixPath(self.bucket) / _safe_folder(folder) / _unique_name(filename)
        target = self.root / Path(*relative.parts)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        await run_in_threadpool(_write)
        logger.info("Stored %s (%s, %d bytes)", relative, content_type, len(data))
        return self._public_url(relative)


_storage: BlobStorage | None = None


def get_blob_storage() -> BlobStorage:
    """Shared storage instance. Used as FastAPI dependency."""
    global _storage
    if _storage is None:
        _storage = LocalBlobStorage(
            root=settings.upload_dir,
            url_prefix=settings.uploads_url_prefix,
            bucket=settings.storage_bucket,
            base_url=settings.public_base_url,
        )
    return _storage
