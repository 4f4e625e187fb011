"""Capture client configuration.

One ``CaptureConfig`` is built at startup and handed to ``CaptureSession``;
nothing in the client reads global state.
"""
from __future__ import annotations

from pydantic import BaseModel, Field


class CameraSettings(BaseModel):
    preferred_camera: str = "environment"
    max_width: int = Field(1920, ge=1)
    max_height: int = Field(1080, ge=1)
    image_quality: float = Field(0.9, gt=0, le=1)
    photo_format: str = "image/jpeg"


class UploadSettings(BaseModel):
    relay_url: str = "http://localhost:3000"
    upload_path: str = "/api/upload"
    max_file_size: int = Field(10 * 1024 * 1024, gt=0)
    allowed_formats: list[str] = ["image/jpeg", "image/png", "image/webp"]
    timeout: float = 30.0


class CaptureMessages(BaseModel):
    camera_access_denied: str = "Camera access was denied. Please allow camera access and try again."
    no_camera_found: str = "No camera found on this device."
    camera_error: str = "Failed to access camera. Please try again."
    capture_failed: str = "Failed to capture photo. Please try again."
    no_photo: str = "No photo to upload."
    upload_failed: str = "Failed to upload photo: {reason}"


class CaptureConfig(BaseModel):
    app_title: str = "Wedding Photos - Share Your Moments"
    couple_names: str = "Lita & Arya"
    camera: CameraSettings = CameraSettings()
    upload: UploadSettings = UploadSettings()
    messages: CaptureMessages = CaptureMessages()
