from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Relay configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Google Cloud
    project_id: Optional[str] = Field(
        default=None,
        validation_alias="GOOGLE_CLOUD_PROJECT_ID",
        description="GCP project ID",
    )
    credentials_file: Optional[str] = Field(
        default=None,
        validation_alias="GOOGLE_CLOUD_KEY_FILE",
        description="Path to a service-account JSON file. Falls back to application default credentials.",
    )

    # Cloud Storage
    bucket_name: str = Field("bucket-armalino-photo")
    upload_prefix: str = Field("wedding-photos", description="Object name prefix for uploaded photos.")
    public_images: bool = Field(True, description="If true, uploaded photos are made publicly readable.")

    # Upload limits / processing
    max_upload_bytes: int = Field(10 * 1024 * 1024, gt=0)
    compress_uploads: bool = Field(False, description="Re-encode uploads as JPEG before storing them.")
    image_max_dim: int = Field(1920, description="Maximum width or height for re-encoded photos (pixels).")
    image_quality: int = Field(90, ge=1, le=100, description="JPEG quality for re-encoded photos (1-100).")

    # Object metadata
    source_tag: str = Field("wedding-photos-app")
    couple_names: str = Field("Lita & Arya")

    # Server
    log_level: str = Field("INFO")
    port: int = Field(3000)

    @property
    def max_upload_size_label(self) -> str:
        """Upload ceiling for messages, e.g. ``10MB`` or ``5.5MB``."""

        return f"{self.max_upload_bytes / (1024 * 1024):g}MB"


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
