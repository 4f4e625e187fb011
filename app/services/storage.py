"""Google Cloud Storage helper for the photo relay.

Responsible for storing guest photos, optional re-encoding, listing and
deleting them.  Objects are stored under the following key pattern:

    {prefix}/{timestamp}_{id}.{ext}

where ``timestamp`` is the UTC upload time in ISO-8601 form with ``:`` and
``.`` replaced by ``-`` and ``id`` is the first eight hex digits of a random
UUID.  Keys are unique without any coordination between requests.
"""
from __future__ import annotations

import io
import logging
import os
import re
import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple

from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage
from PIL import Image
from requests.exceptions import RequestException

from app.config import Settings
from app.errors import PhotoNotFoundError, StorageError
from app.models import PhotoArtifact, PhotoInfo, UploadResult

logger = logging.getLogger(__name__)

_STORAGE_ERRORS = (GoogleAPIError, GoogleAuthError, RequestException)
_SAFE_EXTENSION = re.compile(r"^\.[a-z0-9]{1,5}$")


class PhotoStore:
    """Wrapper around Google Cloud Storage uploads, listings and deletes."""

    def __init__(self, settings: Settings, client: Optional[storage.Client] = None) -> None:
        self._settings = settings
        self._client = client if client is not None else _make_client(settings)
        self._bucket = self._client.bucket(settings.bucket_name)

    @property
    def bucket_name(self) -> str:
        return self._settings.bucket_name

    def check_bucket(self) -> bool:
        try:
            exists = self._bucket.exists()
        except _STORAGE_ERRORS as exc:
            logger.warning("Could not check GCS bucket '%s': %s", self.bucket_name, exc)
            return False
        if not exists:
            logger.warning("GCS bucket '%s' does not exist or access denied.", self.bucket_name)
        return exists

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    def upload_photo(self, artifact: PhotoArtifact) -> UploadResult:
        """Store a photo and return its public location.

        The caller is expected to have validated content type and size;
        this method only talks to the bucket.
        """

        data_to_upload = artifact.data
        final_content_type = artifact.content_type
        name_hint = artifact.original_name

        if self._settings.compress_uploads:
            try:
                data_to_upload, final_content_type = _compress_image(
                    artifact.data,
                    max_dim=self._settings.image_max_dim,
                    quality=self._settings.image_quality,
                )
                name_hint = None  # extension follows the re-encoded type
            except (OSError, ValueError, Image.DecompressionBombError) as exc:
                logger.warning("Image compression failed, uploading original bytes: %s", exc)

        uploaded_at = datetime.now(timezone.utc)
        blob_name = build_storage_key(
            self._settings.upload_prefix,
            name_hint,
            final_content_type,
            now=uploaded_at,
        )
        blob = self._bucket.blob(blob_name)

        blob.metadata = {
            "originalName": artifact.original_name or "",
            "uploadedAt": _isoformat(uploaded_at),
            "source": self._settings.source_tag,
            "coupleNames": self._settings.couple_names,
        }

        try:
            blob.upload_from_string(data_to_upload, content_type=final_content_type)
        except _STORAGE_ERRORS as exc:
            logger.error("Upload of %s failed: %s", blob_name, exc)
            raise StorageError(str(exc), error="Failed to upload photo") from exc

        if self._settings.public_images:
            try:
                blob.make_public()
            except _STORAGE_ERRORS as exc:
                logger.error("Making %s public failed: %s", blob_name, exc)
                self._discard(blob)
                raise StorageError(str(exc), error="Failed to upload photo") from exc

        logger.info("Photo uploaded successfully: %s", blob_name)
        return UploadResult(
            filename=blob_name,
            public_url=blob.public_url,
            size=len(data_to_upload),
            uploaded_at=uploaded_at,
        )

    def list_photos(self) -> list[PhotoInfo]:
        try:
            blobs = list(self._bucket.list_blobs(prefix=f"{self._settings.upload_prefix}/"))
        except _STORAGE_ERRORS as exc:
            logger.error("Listing photos failed: %s", exc)
            raise StorageError(str(exc), error="Failed to fetch photos") from exc

        return [
            PhotoInfo(
                name=blob.name,
                size=blob.size,
                uploaded_at=blob.time_created,
                public_url=blob.public_url,
                content_type=blob.content_type,
            )
            for blob in blobs
        ]

    def delete_photo(self, filename: str) -> None:
        blob = self._bucket.blob(f"{self._settings.upload_prefix}/{filename}")
        try:
            blob.delete()
        except NotFound as exc:
            raise PhotoNotFoundError(filename) from exc
        except _STORAGE_ERRORS as exc:
            logger.error("Deleting %s failed: %s", blob.name, exc)
            raise StorageError(str(exc), error="Failed to delete photo") from exc
        logger.info("Photo deleted: %s", blob.name)

    def _discard(self, blob: storage.Blob) -> None:
        try:
            blob.delete()
        except _STORAGE_ERRORS as exc:
            logger.error("Orphaned private object %s left in bucket: %s", blob.name, exc)


# ------------------------------------------------------------------
# Helper functions
# ------------------------------------------------------------------

def build_storage_key(
    prefix: str,
    original_name: Optional[str],
    content_type: str,
    *,
    now: Optional[datetime] = None,
) -> str:
    """Return ``{prefix}/{timestamp}_{id}{ext}`` for a new upload."""

    now = now or datetime.now(timezone.utc)
    timestamp = _isoformat(now).replace(":", "-").replace(".", "-")
    unique_id = uuid.uuid4().hex[:8]
    return f"{prefix}/{timestamp}_{unique_id}{_pick_extension(original_name, content_type)}"


def _isoformat(moment: datetime) -> str:
    # Millisecond precision with a trailing Z, e.g. 2025-08-15T18:30:12.345Z
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def _pick_extension(original_name: Optional[str], content_type: str) -> str:
    if original_name:
        ext = os.path.splitext(original_name)[1].lower()
        if _SAFE_EXTENSION.match(ext):
            return ext
    return "." + _content_type_to_extension(content_type)


def _content_type_to_extension(content_type: str) -> str:
    mapping = {
        "image/jpeg": "jpg",
        "image/jpg": "jpg",
        "image/png": "png",
        "image/webp": "webp",
        "image/gif": "gif",
        "image/heic": "heic",
    }
    return mapping.get(content_type.split(";")[0].strip().lower(), "jpg")


def _make_client(settings: Settings) -> storage.Client:  # pragma: no cover
    if settings.credentials_file:
        return storage.Client.from_service_account_json(
            settings.credentials_file, project=settings.project_id
        )
    # Application default credentials (Cloud Run, gcloud auth, ...)
    return storage.Client(project=settings.project_id)


def _compress_image(
    file_bytes: bytes,
    *,
    max_dim: int,
    quality: int,
) -> Tuple[bytes, str]:
    """Resize/compress image bytes using Pillow and return (bytes, new_content_type)."""

    with Image.open(io.BytesIO(file_bytes)) as img:
        img = img.convert("RGB")  # ensure RGB for JPEG
        # Resize preserving aspect ratio if necessary
        width, height = img.size
        if max(width, height) > max_dim:
            img.thumbnail((max_dim, max_dim))
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=quality, optimize=True)
        return buffer.getvalue(), "image/jpeg"
