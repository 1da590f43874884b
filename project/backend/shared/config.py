"""
Configuration management.

Centralized environment variable management and validation.
"""

from pathlib import Path
from typing import Literal, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from shared.errors import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: Literal["development", "staging", "production", "test"] = "development"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_dir: Path = Path("logs")

    # Default root for run workspaces (frames, audio, final video)
    output_dir: Path = Path("video_output")

    # Speech synthesis (Smallest.ai waves API)
    # SMALLEST_API_KEY is optional: without it audio generation is skipped
    # and every scene is rendered silent.
    smallest_api_key: Optional[str] = None
    tts_base_url: str = "https://waves-api.smallest.ai/api/v1"
    tts_sample_rate: int = 24000
    tts_speed: float = 1.0
    tts_timeout_seconds: float = 60.0

    # External binaries
    ffmpeg_bin: str = "ffmpeg"
    ffprobe_bin: str = "ffprobe"

    @field_validator("tts_base_url")
    @classmethod
    def validate_tts_base_url(cls, v: str) -> str:
        """Validate speech API base URL format."""
        if not v.startswith(("http://", "https://")):
            raise ConfigError("TTS_BASE_URL must be a valid HTTP/HTTPS URL")
        return v.rstrip("/")

    @field_validator("tts_sample_rate")
    @classmethod
    def validate_tts_sample_rate(cls, v: int) -> int:
        """Validate sample rate is a positive integer."""
        if v <= 0:
            raise ConfigError("TTS_SAMPLE_RATE must be positive")
        return v

    @field_validator("smallest_api_key")
    @classmethod
    def validate_smallest_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty key as not configured."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def speech_enabled(self) -> bool:
        """Whether speech synthesis credentials are configured."""
        return self.smallest_api_key is not None


# Singleton instance
try:
    settings = Settings()
except Exception as e:
    # Re-raise as ConfigError for consistency
    if isinstance(e, ConfigError):
        raise
    raise ConfigError(f"Failed to load configuration: {str(e)}") from e
