"""Admin endpoints for listing and deleting stored photos."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from app.dependencies import get_photo_store
from app.models import DeleteResult, ErrorResponse, PhotoList
from app.services.storage import PhotoStore

router = APIRouter(prefix="/api/photos", tags=["photos"])
logger = logging.getLogger(__name__)


@router.get("", response_model=PhotoList, responses={500: {"model": ErrorResponse}})
async def list_photos(store: PhotoStore = Depends(get_photo_store)):
    photos = await run_in_threadpool(store.list_photos)
    return PhotoList(count=len(photos), photos=photos)


@router.delete(
    "/{filename}",
    response_model=DeleteResult,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def delete_photo(filename: str, store: PhotoStore = Depends(get_photo_store)):
    await run_in_threadpool(store.delete_photo, filename)
    return DeleteResult()
