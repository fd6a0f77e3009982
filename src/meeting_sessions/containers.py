"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from meeting_sessions.adapters.meeting_gateway import (
    HttpxMeetingGateway,
    MeetingGateway,
)
from meeting_sessions.config import Settings
from meeting_sessions.domain.provider import MaskingPolicy
from meeting_sessions.services.permissions import ProviderPermissionService
from meeting_sessions.services.reaper import ExpiryReaper
from meeting_sessions.services.registry import SessionRegistry, utc_now
from meeting_sessions.services.transcription import TranscriptionCoordinator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    gateway: MeetingGateway
    registry: SessionRegistry
    transcription: TranscriptionCoordinator
    reaper: ExpiryReaper
    permission_service: ProviderPermissionService
    close_resources: Callable[[], Awaitable[None]]


def build_services(
    settings: Settings,
    gateway: MeetingGateway,
    close_resources: Callable[[], Awaitable[None]],
    clock: Callable[[], datetime] = utc_now,
) -> AppContainer:
    """Wire the session services around a gateway."""
    registry = SessionRegistry(
        gateway=gateway, media_region=settings.media_region, clock=clock
    )
    transcription = TranscriptionCoordinator(
        registry=registry,
        gateway=gateway,
        default_region=settings.transcription_region or settings.media_region,
        default_locale=settings.transcription_language,
        masking_policy=MaskingPolicy(
            content_identification_type=(
                "PII" if settings.transcription_pii_identification else None
            )
        ),
        clock=clock,
    )
    reaper = ExpiryReaper(
        registry=registry,
        ttl=timedelta(minutes=settings.session_ttl_minutes),
        interval_seconds=settings.reaper_interval_minutes * 60,
        clock=clock,
    )
    return AppContainer(
        settings=settings,
        gateway=gateway,
        registry=registry,
        transcription=transcription,
        reaper=reaper,
        permission_service=ProviderPermissionService(gateway),
        close_resources=close_resources,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    gateway = HttpxMeetingGateway.create(
        base_url=resolved_settings.provider_base_url,
        api_key=resolved_settings.provider_api_key,
        timeout_seconds=resolved_settings.provider_timeout_seconds,
    )

    async def close_resources() -> None:
        await gateway.close()

    return build_services(resolved_settings, gateway, close_resources)
