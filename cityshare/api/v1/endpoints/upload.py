"""
Upload endpoint - multipart image upload to blob storage.
Challenge: Enforce type/size policy before anything is stored.
"""

from fastapi import APIRouter, File, Form, UploadFile

from cityshare.core.dependencies import CurrentUser, UploadServiceDep
from cityshare.schemas.upload import UploadResponse
from cityshare.services.upload_service import IncomingFile

router = APIRouter()


@router.post("", response_model=UploadResponse)
async def upload_images(
    svc: UploadServiceDep,
    user: CurrentUser,
    files: list[UploadFile] = File(...),
    folder: str | None = Form(None),
):
    """Store image(s); returns their public URLs in upload order."""
    incoming = []
    for f in files:
        # One byte past the limit is enough to reject an oversized file
        incoming.append(
            IncomingFile(
                filename=f.filename or "",
                content_type=f.content_type or "",
                data=await f.read(svc.max_bytes + 1),
            )
        )
    urls = await svc.upload_images(incoming, folder=folder)
    return UploadResponse(urls=urls, count=len(urls))
