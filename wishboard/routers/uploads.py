"""
Upload router.

POST /upload — multipart form, field `file`; returns `{url, pathname}`
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from wishboard.core.errors import InvalidUploadError
from wishboard.deps import get_uploader
from wishboard.schemas.common import Envelope
from wishboard.schemas.uploads import UploadOut
from wishboard.services.uploads import ObjectStoreUploader

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post(
    "",
    response_model=Envelope[UploadOut],
    summary="Upload a photo",
    responses={
        400: {"description": "No file, empty file, or file too large."},
        500: {"description": "Object store rejected the upload."},
    },
)
async def upload_file(
    file: Optional[UploadFile] = File(default=None),
    uploader: ObjectStoreUploader = Depends(get_uploader),
):
    """
    Store the file under a timestamp-qualified key and return its public URL.
    No retries: on failure the caller proceeds without an image.
    """
    if file is None:
        raise InvalidUploadError("No file provided.")
    data = await file.read()
    stored = await run_in_threadpool(uploader.upload, data, file.filename, file.content_type)
    return Envelope[UploadOut](data=UploadOut(url=stored.url, pathname=stored.pathname))
