from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PhotoArtifact(BaseModel):
    """An encoded photo on its way from the camera to the relay."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    content_type: str
    original_name: str | None = None
    captured_at: datetime = Field(default_factory=utcnow)

    @property
    def size(self) -> int:
        return len(self.data)


class UploadResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Photo uploaded successfully"
    filename: str
    public_url: str = Field(..., alias="publicUrl")
    size: int = Field(..., ge=0)
    uploaded_at: datetime = Field(..., alias="uploadedAt")


class PhotoInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    size: int | None = None
    uploaded_at: datetime | None = Field(None, alias="uploadedAt")
    public_url: str = Field(..., alias="publicUrl")
    content_type: str | None = Field(None, alias="contentType")


class PhotoList(BaseModel):
    success: bool = True
    count: int
    photos: list[PhotoInfo] = []


class DeleteResult(BaseModel):
    success: bool = True
    message: str = "Photo deleted successfully"


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


class HealthStatus(BaseModel):
    status: str = "OK"
    message: str = "Wedding Photos Server is running"
