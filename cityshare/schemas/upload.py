"""Upload response schema."""

from pydantic import BaseModel


class UploadResponse(BaseModel):
    success: bool = True
    urls: list[str]
    count: int
