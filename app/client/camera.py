"""Camera adapters and frame encoding for the capture client."""
from __future__ import annotations

import io
import logging
import os
from abc import ABC, abstractmethod
from itertools import cycle
from pathlib import Path
from typing import Iterator, Optional

from PIL import Image

from app.client.config import CameraSettings

logger = logging.getLogger(__name__)

_PIL_FORMATS = {
    "image/jpeg": ("JPEG", "jpg"),
    "image/png": ("PNG", "png"),
    "image/webp": ("WEBP", "webp"),
}
_IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp"}


class CameraError(Exception):
    """Camera could not be opened or read."""


class CameraPermissionError(CameraError):
    """Access to the camera was refused."""


class CameraNotFoundError(CameraError):
    """No camera device is available."""


class CameraAdapter(ABC):
    """A source of still frames."""

    @abstractmethod
    def open(self) -> None:
        """Acquire the device. Raises a ``CameraError`` subclass on failure."""

    @abstractmethod
    def capture_frame(self) -> Image.Image:
        """Grab one frame from an opened device."""

    def close(self) -> None:
        """Release the device. Safe to call more than once."""

    @property
    def is_open(self) -> bool:
        return False


class ImageFileCamera(CameraAdapter):
    """Serves still images from a single file or a directory of images."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._frames: Optional[Iterator[Path]] = None

    @property
    def is_open(self) -> bool:
        return self._frames is not None

    def open(self) -> None:
        if not self._path.exists():
            raise CameraNotFoundError(f"No image source at {self._path}")
        if not os.access(self._path, os.R_OK):
            raise CameraPermissionError(f"Cannot read {self._path}")

        if self._path.is_dir():
            files = sorted(p for p in self._path.iterdir() if p.suffix.lower() in _IMAGE_SUFFIXES)
            if not files:
                raise CameraNotFoundError(f"No images in {self._path}")
        else:
            files = [self._path]
        self._frames = cycle(files)
        logger.debug("image_file_camera: opened %s (%d frame(s))", self._path, len(files))

    def capture_frame(self) -> Image.Image:
        if self._frames is None:
            raise CameraError("Camera is not open")
        source = next(self._frames)
        try:
            with Image.open(source) as img:
                img.load()
                return img.copy()
        except PermissionError as exc:
            raise CameraPermissionError(str(exc)) from exc

    def close(self) -> None:
        self._frames = None


class SolidColorCamera(CameraAdapter):
    """Synthesises plain frames; handy for demos and tests."""

    def __init__(self, size: tuple[int, int] = (640, 480), color: tuple[int, int, int] = (255, 255, 255)) -> None:
        self._size = size
        self._color = color
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        self._open = True

    def capture_frame(self) -> Image.Image:
        if not self._open:
            raise CameraError("Camera is not open")
        return Image.new("RGB", self._size, self._color)

    def close(self) -> None:
        self._open = False


def extension_for(content_type: str) -> str:
    try:
        return _PIL_FORMATS[content_type][1]
    except KeyError:
        raise ValueError(f"Unsupported photo format: {content_type}") from None


def encode_frame(frame: Image.Image, settings: CameraSettings) -> bytes:
    """Fit ``frame`` inside the configured bounds and encode it."""

    try:
        pil_format = _PIL_FORMATS[settings.photo_format][0]
    except KeyError:
        raise ValueError(f"Unsupported photo format: {settings.photo_format}") from None

    img = frame.convert("RGB")
    if img.width > settings.max_width or img.height > settings.max_height:
        img.thumbnail((settings.max_width, settings.max_height))

    buffer = io.BytesIO()
    save_kwargs = {}
    if pil_format in ("JPEG", "WEBP"):
        save_kwargs["quality"] = round(settings.image_quality * 100)
    img.save(buffer, format=pil_format, **save_kwargs)
    return buffer.getvalue()
