"""
Upload service - image policy in front of blob storage.
All files are checked before any is stored, so a bad file stores nothing.
"""

import logging
from dataclasses import dataclass

from cityshare.config import get_settings
from cityshare.core.exceptions import InvalidInput
from cityshare.storage.blob_storage import BlobStorage

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class IncomingFile:
    filename: str
    content_type: str
    data: bytes


class UploadService:

    def __init__(
        self,
        storage: BlobStorage,
        allowed_types: list[str] | None = None,
        max_bytes: int | None = None,
    ):
        self.storage = storage
        self.allowed_types = allowed_types or settings.upload_allowed_types
        self.max_bytes = max_bytes or settings.upload_max_bytes

    def validate(self, files: list[IncomingFile]) -> None:
        if not files:
            raise InvalidInput("No files provided")
        for f in files:
            if f.content_type not in self.allowed_types:
                raise InvalidInput(
                    f"Invalid file type: {f.content_type}. "
                    f"Allowed types: {', '.join(self.allowed_types)}"
                )
        max_mb = self.max_bytes // (1024 * 1024)
        for f in files:
            if len(f.data) > self.max_bytes:
                raise InvalidInput(f"File too large: {f.filename}. Max size: {max_mb}MB")

    async def upload_images(self, files: list[IncomingFile], folder: str | None = None) -> list[str]:
        """Validate every file, then store them in order. Returns public URLs."""
        self.validate(files)
        urls = []
        for f in files:
            urls.append(await self.storage.upload(f.data, f.filename, f.content_type, folder))
        logger.info("Uploaded %d image(s) to folder=%r", len(urls), folder)
        return urls
