"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    provider_base_url: str
    provider_api_key: str
    provider_timeout_seconds: float = 10.0
    admin_token: str
    media_region: str = "us-east-1"
    transcription_region: str | None = None
    transcription_language: str = "es-US"
    transcription_pii_identification: bool = False
    session_ttl_minutes: int = 60
    reaper_interval_minutes: int = 15
    reaper_enabled: bool = True
    cors_allowed_origins: str | None = None
    environment: str = _ENVIRONMENT
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_origins(raw: str | None) -> list[str]:
    """Parse allowed CORS origins from env; an empty list means any origin."""
    if raw is None:
        return []
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return []
    return [origin.strip() for origin in cleaned.split(",") if origin.strip()]
