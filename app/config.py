"""
Application settings for the image compression API.

Values are read from environment variables (and an optional ``.env`` file
at the project root).
"""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Ceiling applied to uploads, matching the browser client's limit
DEFAULT_MAX_UPLOAD_SIZE = 10 * 1024 * 1024


class Settings(BaseSettings):
    """Runtime configuration for the compression service."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[1] / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Image Compression API"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    max_upload_size: int = Field(
        DEFAULT_MAX_UPLOAD_SIZE, gt=0, description="Maximum accepted upload size in bytes"
    )
    allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    png_quantize: bool = Field(
        False, description="Palette-quantize PNG output with pngquant before lossless packing"
    )
    pngquant_path: str = "pngquant"
    pngquant_timeout: float = Field(30.0, gt=0)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
