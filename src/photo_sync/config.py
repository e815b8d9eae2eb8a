"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from photo_sync.domain.camera import FacingMode

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

_MEGABYTE = 1024 * 1024


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    storage_base_url: str
    request_timeout_seconds: float = 15
    storage_quota_bytes: int = 100 * _MEGABYTE
    upload_max_bytes: int = 10 * _MEGABYTE
    gallery_max_bytes: int = 5 * _MEGABYTE
    camera_index: int = 0
    default_facing_mode: str = "rear"
    capture_width: int = 1280
    capture_height: int = 720
    jpeg_quality: int = 80
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="PHOTO_SYNC_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_facing_mode(raw: str | None) -> FacingMode:
    """Parse a facing mode from env, accepting browser-style aliases."""
    if raw is None:
        return FacingMode.REAR
    cleaned = raw.strip().lower()
    if cleaned in {"front", "user", "selfie"}:
        return FacingMode.FRONT
    if cleaned in {"", "rear", "back", "environment"}:
        return FacingMode.REAR
    raise ValueError(f"Unknown facing mode: {raw}")
