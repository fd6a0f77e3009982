"""Tests for container wiring."""

import asyncio
from datetime import timedelta

from meeting_sessions.adapters.meeting_gateway import HttpxMeetingGateway
from meeting_sessions.containers import build_container


def test_build_container_creates_services(settings) -> None:
    settings.session_ttl_minutes = 30
    settings.transcription_region = "eu-west-1"
    settings.transcription_pii_identification = True
    container = build_container(settings)

    assert isinstance(container.gateway, HttpxMeetingGateway)
    assert container.registry.gateway is container.gateway
    assert container.transcription.registry is container.registry
    assert container.transcription.default_region == "eu-west-1"
    assert container.transcription.masking_policy.content_identification_type == "PII"
    assert container.reaper.registry is container.registry
    assert container.reaper.ttl == timedelta(minutes=30)
    assert container.reaper.interval_seconds == 15 * 60
    asyncio.run(container.close_resources())


def test_transcription_region_defaults_to_media_region(settings) -> None:
    container = build_container(settings)

    assert container.transcription.default_region == settings.media_region
    assert container.transcription.masking_policy.content_identification_type is None
    asyncio.run(container.close_resources())
