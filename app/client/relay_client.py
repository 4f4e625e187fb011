"""Async client for the upload relay."""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from app.client.config import UploadSettings
from app.models import HealthStatus, PhotoArtifact, UploadResult

logger = logging.getLogger(__name__)


class RelayUploadError(Exception):
    """Raised when the relay rejects an upload or cannot be reached."""

    def __init__(self, status: Optional[int], message: str, response_json: Optional[dict[str, Any]] = None):
        super().__init__(f"Upload failed ({status}): {message}" if status else f"Upload failed: {message}")
        self.status = status
        self.message = message
        self.response_json = response_json or {}


class RelayClient:  # pylint: disable=too-few-public-methods
    """Minimal async client for the ``/api`` surface of the relay."""

    def __init__(
        self,
        base_url: str,
        *,
        upload_path: str = "/api/upload",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._upload_path = upload_path
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls, settings: UploadSettings, *, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "RelayClient":
        return cls(
            settings.relay_url,
            upload_path=settings.upload_path,
            timeout=settings.timeout,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def upload(self, photo: PhotoArtifact) -> UploadResult:
        files = {"photo": (photo.original_name or "photo.jpg", photo.data, photo.content_type)}
        logger.debug("POST %s (%d bytes)", self._upload_path, photo.size)
        try:
            resp = await self._client.post(self._upload_path, files=files)
        except httpx.HTTPError as exc:
            raise RelayUploadError(None, str(exc) or exc.__class__.__name__) from exc

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.status_code >= 400:
            raise RelayUploadError(resp.status_code, _error_message(data, resp.text), data)
        if not isinstance(data, dict) or not data.get("success"):
            raise RelayUploadError(resp.status_code, _error_message(data, "Upload failed"), data)

        result = UploadResult.model_validate(data)
        logger.info("Photo uploaded successfully: %s", result.public_url)
        return result

    async def health(self) -> HealthStatus:
        try:
            resp = await self._client.get("/api/health")
        except httpx.HTTPError as exc:
            raise RelayUploadError(None, str(exc) or exc.__class__.__name__) from exc
        if resp.status_code >= 400:
            raise RelayUploadError(resp.status_code, resp.text)
        return HealthStatus.model_validate(resp.json())

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_message(data: Any, fallback: str) -> str:
    if isinstance(data, dict) and data.get("error"):
        if data.get("details"):
            return f"{data['error']} ({data['details']})"
        return data["error"]
    return fallback or "Upload failed"
