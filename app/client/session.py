"""Guest capture flow: welcome -> camera -> preview -> upload -> success/error.

Each transition is a direct screen swap.  A session handles one photo at a
time and never runs two uploads at once.
"""
from __future__ import annotations

import enum
import logging
from typing import Optional

from app.client.camera import (
    CameraAdapter,
    CameraError,
    CameraNotFoundError,
    CameraPermissionError,
    encode_frame,
    extension_for,
)
from app.client.config import CaptureConfig
from app.client.relay_client import RelayClient, RelayUploadError
from app.models import PhotoArtifact, UploadResult

logger = logging.getLogger(__name__)


class Screen(str, enum.Enum):
    WELCOME = "welcome"
    CAMERA = "camera"
    PREVIEW = "preview"
    UPLOAD = "upload"
    SUCCESS = "success"
    ERROR = "error"


class InvalidTransition(Exception):
    def __init__(self, current: Screen, target: Screen) -> None:
        super().__init__(f"Cannot go from {current.value} to {target.value}")
        self.current = current
        self.target = target


class CaptureSession:
    """Drives one guest through capturing and sharing a photo."""

    def __init__(
        self,
        camera: CameraAdapter,
        config: Optional[CaptureConfig] = None,
        relay: Optional[RelayClient] = None,
    ) -> None:
        self.config = config or CaptureConfig()
        self._camera = camera
        self._relay = relay or RelayClient.from_settings(self.config.upload)
        self.screen = Screen.WELCOME
        self.photo: Optional[PhotoArtifact] = None
        self.error_message: Optional[str] = None
        self.last_result: Optional[UploadResult] = None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def show_camera(self) -> bool:
        """Open the camera. Returns False and shows the error screen on failure."""

        self._require(Screen.CAMERA, Screen.WELCOME, Screen.PREVIEW, Screen.ERROR, Screen.SUCCESS)
        self.photo = None
        self.error_message = None
        messages = self.config.messages
        try:
            self._camera.open()
        except CameraPermissionError as exc:
            logger.warning("Camera access denied: %s", exc)
            self.show_error(messages.camera_access_denied)
            return False
        except CameraNotFoundError as exc:
            logger.warning("No camera found: %s", exc)
            self.show_error(messages.no_camera_found)
            return False
        except (CameraError, OSError) as exc:
            logger.error("Error accessing camera: %s", exc)
            self.show_error(messages.camera_error)
            return False
        self._show(Screen.CAMERA)
        return True

    def capture(self) -> bool:
        """Grab and encode one frame, then stop the camera."""

        self._require(Screen.PREVIEW, Screen.CAMERA)
        camera_settings = self.config.camera
        try:
            frame = self._camera.capture_frame()
            data = encode_frame(frame, camera_settings)
        except (CameraError, OSError, ValueError) as exc:
            logger.error("Error capturing photo: %s", exc)
            self._camera.close()
            self.show_error(self.config.messages.capture_failed)
            return False

        self._camera.close()
        self.photo = PhotoArtifact(
            data=data,
            content_type=camera_settings.photo_format,
            original_name=f"photo.{extension_for(camera_settings.photo_format)}",
        )
        self._show(Screen.PREVIEW)
        return True

    def retake(self) -> bool:
        self._require(Screen.CAMERA, Screen.PREVIEW)
        return self.show_camera()

    async def upload(self) -> Optional[UploadResult]:
        """Send the captured photo to the relay.

        Returns the relay's result on success; on failure the error screen
        is shown and None is returned.
        """

        if self.screen is Screen.UPLOAD:
            raise InvalidTransition(self.screen, Screen.UPLOAD)
        if self.photo is None:
            self.show_error(self.config.messages.no_photo)
            return None
        self._require(Screen.UPLOAD, Screen.PREVIEW)

        rejection = self._check_photo(self.photo)
        if rejection:
            self.show_error(self.config.messages.upload_failed.format(reason=rejection))
            return None

        self._show(Screen.UPLOAD)
        try:
            result = await self._relay.upload(self.photo)
        except RelayUploadError as exc:
            logger.error("Upload error: %s", exc)
            self.show_error(self.config.messages.upload_failed.format(reason=exc.message))
            return None

        self.last_result = result
        self.photo = None
        self._show(Screen.SUCCESS)
        return result

    def reset(self) -> None:
        """Back to the welcome screen, dropping any captured photo."""

        self._camera.close()
        self.photo = None
        self.error_message = None
        self._show(Screen.WELCOME)

    def show_error(self, message: str) -> None:
        self._camera.close()
        self.error_message = message
        self._show(Screen.ERROR)

    async def aclose(self) -> None:
        self._camera.close()
        await self._relay.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _show(self, screen: Screen) -> None:
        logger.debug("screen %s -> %s", self.screen.value, screen.value)
        self.screen = screen

    def _require(self, target: Screen, *allowed: Screen) -> None:
        if self.screen not in allowed:
            raise InvalidTransition(self.screen, target)

    def _check_photo(self, photo: PhotoArtifact) -> Optional[str]:
        upload_settings = self.config.upload
        if photo.content_type not in upload_settings.allowed_formats:
            return f"unsupported format {photo.content_type}"
        if photo.size > upload_settings.max_file_size:
            return "File too large"
        return None
