"""Relay error types rendered as ``{"error", "details"}`` JSON bodies."""
from __future__ import annotations

from typing import Any, Optional


class RelayError(Exception):
    """Base class for errors surfaced to HTTP callers."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, details: Optional[str] = None, *, error: Optional[str] = None) -> None:
        if error is not None:
            self.error = error
        self.details = details
        super().__init__(f"{self.error}: {details}" if details else self.error)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class MissingPhotoError(RelayError):
    status_code = 400
    error = "No photo file provided"


class UnsupportedMediaTypeError(RelayError):
    status_code = 400
    error = "Only image files are allowed"


class PhotoTooLargeError(RelayError):
    status_code = 400
    error = "File too large"


class EmptyPhotoError(RelayError):
    status_code = 400
    error = "Empty photo file"


class PhotoNotFoundError(RelayError):
    status_code = 404
    error = "Photo not found"


class StorageError(RelayError):
    """Raised when Cloud Storage rejects or fails an operation."""

    status_code = 500
