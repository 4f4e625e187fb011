from .camera import (
    CameraAdapter,
    CameraError,
    CameraNotFoundError,
    CameraPermissionError,
    ImageFileCamera,
    SolidColorCamera,
)
from .config import CameraSettings, CaptureConfig, CaptureMessages, UploadSettings
from .relay_client import RelayClient, RelayUploadError
from .session import CaptureSession, InvalidTransition, Screen

__all__ = [
    "CameraAdapter",
    "CameraError",
    "CameraNotFoundError",
    "CameraPermissionError",
    "CameraSettings",
    "CaptureConfig",
    "CaptureMessages",
    "CaptureSession",
    "ImageFileCamera",
    "InvalidTransition",
    "RelayClient",
    "RelayUploadError",
    "Screen",
    "SolidColorCamera",
    "UploadSettings",
]
