"""Transcription state machine layered on registry sessions."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from meeting_sessions.adapters.meeting_gateway import MeetingGateway
from meeting_sessions.domain.errors import GatewayError
from meeting_sessions.domain.provider import MaskingPolicy
from meeting_sessions.domain.sessions import (
    TranscriptionOutcome,
    TranscriptionResult,
    TranscriptionState,
    TranscriptionStatus,
)
from meeting_sessions.services.registry import SessionRegistry, utc_now

DEFAULT_LOCALE = "es-US"

# Spanish variants the provider does not accept directly.
_LOCALE_ALIASES = {
    "es": "es-US",
    "es-ES": "es-US",
}

_logger = logging.getLogger(__name__)


def resolve_locale(language: str | None, default: str = DEFAULT_LOCALE) -> str:
    """Map a requested language tag to a provider locale code."""
    if not language:
        return default
    return _LOCALE_ALIASES.get(language, language)


@dataclass
class TranscriptionCoordinator:
    """Starts and stops transcription, degrading on permission errors."""

    registry: SessionRegistry
    gateway: MeetingGateway
    default_region: str = "us-east-1"
    default_locale: str = DEFAULT_LOCALE
    masking_policy: MaskingPolicy = field(default_factory=MaskingPolicy)
    clock: Callable[[], datetime] = utc_now

    async def start(
        self,
        session_id: str,
        language: str | None = None,
        region: str | None = None,
    ) -> TranscriptionResult:
        """Ask the provider to transcribe, falling back to degraded mode."""
        locale = resolve_locale(language, self.default_locale)
        resolved_region = region or self.default_region
        async with self.registry.locked(session_id) as session:
            try:
                await self.gateway.start_transcription(
                    meeting_id=session_id,
                    locale_code=locale,
                    region=resolved_region,
                    masking_policy=self.masking_policy,
                )
            except GatewayError as exc:
                if not exc.is_authorization_failure:
                    raise
                _logger.warning(
                    "Transcription not authorized for session %s, degrading: %s",
                    session_id,
                    exc,
                )
                session.transcription = TranscriptionState.degraded(
                    locale=locale, region=resolved_region
                )
                return TranscriptionResult(
                    session_id=session_id,
                    outcome=TranscriptionOutcome.DEGRADED,
                    state=session.transcription,
                    detail=str(exc),
                )
            session.transcription = TranscriptionState.provider_managed(
                locale=locale, region=resolved_region
            )
        _logger.info(
            "Transcription started: session=%s locale=%s region=%s",
            session_id,
            locale,
            resolved_region,
        )
        return TranscriptionResult(
            session_id=session_id,
            outcome=TranscriptionOutcome.OK,
            state=session.transcription,
        )

    async def start_degraded(self, session_id: str) -> TranscriptionResult:
        """Enable local-only transcription bookkeeping."""
        async with self.registry.locked(session_id) as session:
            session.transcription = TranscriptionState.degraded()
        _logger.info("Degraded transcription started: session=%s", session_id)
        return TranscriptionResult(
            session_id=session_id,
            outcome=TranscriptionOutcome.DEGRADED,
            state=session.transcription,
        )

    async def stop(self, session_id: str) -> TranscriptionState:
        """Stop transcription; local state changes only if the provider agrees."""
        async with self.registry.locked(session_id) as session:
            # The provider may still be transcribing even in degraded mode.
            await self.gateway.stop_transcription(session_id)
            session.transcription = TranscriptionState.off()
        _logger.info("Transcription stopped: session=%s", session_id)
        return session.transcription

    async def check_status(self, session_id: str) -> TranscriptionStatus:
        """Report local state plus a best-effort provider lookup."""
        state = self.registry.get(session_id).transcription
        remote_enabled: bool | None = None
        remote_error: str | None = None
        remote_meeting: dict[str, object] | None = None
        try:
            status = await self.gateway.get_meeting(session_id)
        except GatewayError as exc:
            _logger.warning(
                "Could not fetch provider status for session %s: %s", session_id, exc
            )
            remote_error = str(exc)
        else:
            remote_enabled = status.transcription_active
            remote_meeting = dict(status.raw)
        return TranscriptionStatus(
            session_id=session_id,
            local_enabled=state.enabled,
            mode=state.mode,
            remote_enabled=remote_enabled,
            checked_at=self.clock(),
            remote_error=remote_error,
            remote_meeting=remote_meeting,
        )
