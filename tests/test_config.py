"""Tests for configuration helpers."""

import pytest

from meeting_sessions.config import Settings, parse_allowed_origins


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, []),
        ("", []),
        ("*", []),
        (
            "https://app.example.com, https://staging.example.com,",
            ["https://app.example.com", "https://staging.example.com"],
        ),
    ],
)
def test_parse_allowed_origins(raw: str | None, expected: list[str]) -> None:
    assert parse_allowed_origins(raw) == expected


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("PROVIDER_BASE_URL", "https://meetings.example.test")
    monkeypatch.setenv("PROVIDER_API_KEY", "key")
    monkeypatch.setenv("ADMIN_TOKEN", "admin")
    monkeypatch.setenv("SESSION_TTL_MINUTES", "90")

    settings = Settings()

    assert settings.session_ttl_minutes == 90
    assert settings.reaper_interval_minutes == 15
    assert settings.media_region == "us-east-1"
    assert settings.transcription_language == "es-US"
    assert settings.log_level == "INFO"
