"""Upload relay endpoint: one multipart photo in, one public URL out."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from app.dependencies import get_app_settings, get_photo_store
from app.errors import (
    EmptyPhotoError,
    MissingPhotoError,
    PhotoTooLargeError,
    UnsupportedMediaTypeError,
)
from app.models import ErrorResponse, PhotoArtifact, UploadResult
from app.services.storage import PhotoStore

router = APIRouter(prefix="/api", tags=["upload"])
logger = logging.getLogger(__name__)

_IMAGE_PREFIX = "image/"


@router.post(
    "/upload",
    response_model=UploadResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_photo(
    photo: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_app_settings),
    store: PhotoStore = Depends(get_photo_store),
):
    if photo is None or not photo.filename:
        raise MissingPhotoError()

    content_type = (photo.content_type or "").lower()
    if not content_type.startswith(_IMAGE_PREFIX):
        logger.info("Rejected upload %r with content type %r", photo.filename, content_type)
        raise UnsupportedMediaTypeError(content_type or "unknown")

    # Read one byte past the ceiling so oversize payloads are detected
    # without buffering all of them.
    data = await photo.read(settings.max_upload_bytes + 1)
    await photo.close()
    if len(data) > settings.max_upload_bytes:
        logger.info("Rejected upload %r: larger than %d bytes", photo.filename, settings.max_upload_bytes)
        raise PhotoTooLargeError(f"Maximum file size is {settings.max_upload_size_label}")
    if not data:
        raise EmptyPhotoError()

    artifact = PhotoArtifact(data=data, content_type=content_type, original_name=photo.filename)
    return await run_in_threadpool(store.upload_photo, artifact)
