from .photo import (
    DeleteResult,
    ErrorResponse,
    HealthStatus,
    PhotoArtifact,
    PhotoInfo,
    PhotoList,
    UploadResult,
)

__all__ = [
    "DeleteResult",
    "ErrorResponse",
    "HealthStatus",
    "PhotoArtifact",
    "PhotoInfo",
    "PhotoList",
    "UploadResult",
]
