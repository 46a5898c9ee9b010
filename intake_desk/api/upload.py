"""Upload API Route: multipart ``POST /upload`` returning ``{"file_url": ...}``."""

from fastapi import APIRouter, File, UploadFile

from ..services.uploads import UploadResult
from .deps import ClientDep

router = APIRouter(tags=["upload"])


@router.post("/upload", response_model=UploadResult)
async def upload_file(client: ClientDep, file: UploadFile = File(...)) -> UploadResult:
    content = await file.read()
    return await client.uploads.upload_file(
        content,
        filename=file.filename,
        content_type=file.content_type,
    )
