"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from meeting_sessions.api.admin import router as admin_router
from meeting_sessions.api.models import (
    CreateMeetingRequest,
    JoinMeetingRequest,
    MeetingRequest,
    StartTranscriptionRequest,
)
from meeting_sessions.app_logging import configure_logging
from meeting_sessions.config import parse_allowed_origins
from meeting_sessions.containers import AppContainer
from meeting_sessions.domain.errors import GatewayError, SessionNotFoundError
from meeting_sessions.domain.sessions import (
    JoinResult,
    SessionSummary,
    TranscriptionOutcome,
    TranscriptionResult,
    TranscriptionStatus,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    allowed_origins = parse_allowed_origins(container.settings.cors_allowed_origins)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        if state_container.settings.reaper_enabled:
            state_container.reaper.start()
        yield
        await state_container.reaper.stop()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
    )
    app.include_router(admin_router)

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found(
        request: Request, exc: SessionNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"error": "Session not found", "meetingId": exc.session_id},
        )

    @app.exception_handler(GatewayError)
    async def gateway_failed(request: Request, exc: GatewayError) -> JSONResponse:
        logger.error("Provider call %s failed: %s", exc.operation, exc)
        content: dict[str, object] = {
            "error": "Meeting provider request failed",
            "operation": exc.operation,
            "code": exc.code,
            "authorizationFailure": exc.is_authorization_failure,
        }
        if container.settings.environment == "local":
            content["details"] = str(exc)
        return JSONResponse(status_code=502, content=content)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/create-meeting")
    async def create_meeting(
        payload: CreateMeetingRequest, request: Request
    ) -> dict[str, str]:
        """Create a provider meeting and register it."""
        state_container: AppContainer = request.app.state.container
        session = await state_container.registry.create(payload.user_id)
        return {"meetingId": session.id}

    @app.get("/list-meetings")
    async def list_meetings(request: Request) -> list[dict[str, object]]:
        """List live meetings."""
        state_container: AppContainer = request.app.state.container
        return [
            _summary_payload(summary)
            for summary in state_container.registry.list_sessions()
        ]

    @app.post("/join-meeting")
    async def join_meeting(
        payload: JoinMeetingRequest, request: Request
    ) -> dict[str, object]:
        """Admit a user into a meeting."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.registry.join(
            payload.meeting_id, payload.user_id, payload.user_name
        )
        return _join_payload(result)

    @app.post("/start-transcription")
    async def start_transcription(
        payload: StartTranscriptionRequest, request: Request
    ) -> dict[str, object]:
        """Start provider transcription, degrading on permission errors."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.transcription.start(
            payload.meeting_id, language=payload.language, region=payload.region
        )
        return _start_payload(result)

    @app.post("/start-transcription-alternative")
    async def start_transcription_alternative(
        payload: MeetingRequest, request: Request
    ) -> dict[str, object]:
        """Enable local-only transcription without contacting the provider."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.transcription.start_degraded(
            payload.meeting_id
        )
        return {
            "success": True,
            "mode": str(result.state.mode),
            "message": "Alternative transcription started",
        }

    @app.post("/stop-transcription")
    async def stop_transcription(
        payload: MeetingRequest, request: Request
    ) -> dict[str, object]:
        """Stop transcription for a meeting."""
        state_container: AppContainer = request.app.state.container
        await state_container.transcription.stop(payload.meeting_id)
        return {"success": True, "message": "Transcription stopped"}

    @app.get("/check-transcription/{meeting_id}")
    async def check_transcription(
        meeting_id: str, request: Request
    ) -> dict[str, object]:
        """Compare local and provider transcription state."""
        state_container: AppContainer = request.app.state.container
        status = await state_container.transcription.check_status(meeting_id)
        return _status_payload(status)

    @app.delete("/delete-meeting/{meeting_id}")
    async def delete_meeting(meeting_id: str, request: Request) -> dict[str, object]:
        """Remove a meeting locally and on the provider."""
        state_container: AppContainer = request.app.state.container
        await state_container.registry.remove(meeting_id)
        return {"success": True, "message": "Meeting deleted"}

    @app.post("/delete-meeting")
    async def delete_meeting_post(
        payload: MeetingRequest, request: Request
    ) -> dict[str, object]:
        """Remove a meeting; POST variant for clients that cannot send DELETE."""
        state_container: AppContainer = request.app.state.container
        await state_container.registry.remove(payload.meeting_id)
        return {"success": True, "message": "Meeting deleted"}

    return app


def _isoformat(value: datetime) -> str:
    return value.astimezone(UTC).isoformat()


def _summary_payload(summary: SessionSummary) -> dict[str, object]:
    return {
        "meetingId": summary.id,
        "externalMeetingId": summary.external_meeting_id,
        "creationTime": _isoformat(summary.created_at),
        "attendeeCount": summary.attendee_count,
        "transcriptionEnabled": summary.transcription_enabled,
    }


def _join_payload(result: JoinResult) -> dict[str, object]:
    session = result.session
    return {
        "meetingInfo": {
            "Meeting": session.meeting,
            "meetingId": session.id,
            "creationTime": _isoformat(session.created_at),
            "transcriptionEnabled": session.transcription.enabled,
        },
        "attendeeInfo": result.attendee.descriptor.raw,
        "isCreator": result.is_creator,
    }


def _start_payload(result: TranscriptionResult) -> dict[str, object]:
    degraded = result.outcome is TranscriptionOutcome.DEGRADED
    payload: dict[str, object] = {
        "success": True,
        "mode": str(result.state.mode),
        "degraded": degraded,
        "alternativeAvailable": degraded,
        "message": (
            "Provider denied transcription, alternative transcription enabled"
            if degraded
            else "Transcription started"
        ),
    }
    if result.detail:
        payload["details"] = result.detail
    return payload


def _status_payload(status: TranscriptionStatus) -> dict[str, object]:
    return {
        "meetingId": status.session_id,
        "transcriptionEnabled": {
            "local": status.local_enabled,
            "provider": bool(status.remote_enabled),
        },
        "mode": str(status.mode),
        "providerStatusKnown": status.remote_enabled is not None,
        "providerError": status.remote_error,
        "providerStatus": status.remote_meeting,
        "serverTime": _isoformat(status.checked_at),
    }
