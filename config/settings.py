"""Application settings and configuration management."""
from __future__ import annotations

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    BIND_HOST: str = "127.0.0.1"
    DEFAULT_TIMEOUT_SECONDS: int = Field(default=300, ge=0)

    MAX_BODY_BYTES: int = Field(default=15 * 1024 * 1024, ge=1)
    MAX_IMAGES: int = Field(default=12, ge=0)
    MAX_IMAGE_BYTES: int = Field(default=5 * 1024 * 1024, ge=1)
    MAX_IMAGE_DIMENSION: int = 4096
    ALLOWED_IMAGE_TYPES: List[str] = Field(
        default_factory=lambda: ["image/png", "image/jpeg", "image/gif", "image/webp"]
    )

    UPLOAD_ROOT: Optional[str] = None
    UPLOAD_DIR_PREFIX: str = "interview-"

    URGENT_THRESHOLD_SECONDS: int = 30
    CLOSE_DELAY_SECONDS: int = 10
    DRAFT_DEBOUNCE_MS: int = 500
    DRAFT_KEY_PREFIX: str = "interview-draft"

    HOST_SETTINGS_PATH: str = "~/.config/interview-form/settings.json"
    VERBOSE: bool = False

    model_config = SettingsConfigDict(
        env_prefix="INTERVIEW_",
        env_file=".env",
        extra="ignore",
        validate_assignment=True,
    )


settings = Settings()
