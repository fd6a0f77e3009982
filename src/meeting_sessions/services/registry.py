"""In-process registry of live meeting sessions."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from meeting_sessions.adapters.meeting_gateway import MeetingGateway
from meeting_sessions.domain.errors import GatewayError, SessionNotFoundError
from meeting_sessions.domain.sessions import (
    Attendee,
    JoinResult,
    Session,
    SessionProjection,
    SessionSummary,
)

_logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(tz=UTC)


@dataclass
class SessionRegistry:
    """Tracks sessions and their attendees, mirroring the remote provider.

    Mutations of one session are serialized by a per-session lock that is held
    across the provider call. Sessions never share a lock, so a slow provider
    response only delays callers of the same session.
    """

    gateway: MeetingGateway
    media_region: str = "us-east-1"
    clock: Callable[[], datetime] = utc_now
    _sessions: dict[str, Session] = field(default_factory=dict, init=False)
    _locks: dict[str, asyncio.Lock] = field(default_factory=dict, init=False)

    async def create(self, creator_id: str | None) -> Session:
        """Create a provider meeting and start tracking it."""
        descriptor = await self.gateway.create_meeting(
            request_token=str(uuid4()),
            region=self.media_region,
            external_id=str(uuid4()),
        )
        session = Session(
            id=descriptor.meeting_id,
            meeting=descriptor,
            created_at=self.clock(),
            creator_id=creator_id,
        )
        self._sessions[session.id] = session
        self._locks[session.id] = asyncio.Lock()
        _logger.info("Session created: id=%s creator=%s", session.id, creator_id)
        return session

    def list_sessions(self) -> list[SessionSummary]:
        """Return a summary of every live session."""
        return [
            SessionSummary(
                id=session.id,
                external_meeting_id=session.external_meeting_id,
                created_at=session.created_at,
                attendee_count=len(session.attendees),
                transcription_enabled=session.transcription.enabled,
            )
            for session in list(self._sessions.values())
        ]

    def get(self, session_id: str) -> Session:
        """Return the live session or raise SessionNotFoundError."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def get_projection(self, session_id: str) -> SessionProjection:
        """Return caller-safe metadata for a session."""
        return _project(self.get(session_id))

    @asynccontextmanager
    async def locked(self, session_id: str) -> AsyncIterator[Session]:
        """Hold the session's lock and yield it while it is still registered."""
        session = self.get(session_id)
        lock = self._locks[session_id]
        async with lock:
            if self._sessions.get(session_id) is not session:
                raise SessionNotFoundError(session_id)
            yield session

    async def join(
        self, session_id: str, user_id: str, display_name: str | None = None
    ) -> JoinResult:
        """Admit a user into a session, reusing an existing attendee."""
        session = self.get(session_id)
        existing = session.attendees.get(user_id)
        if existing is not None:
            return _join_result(session, existing)

        async with self.locked(session_id) as session:
            existing = session.attendees.get(user_id)
            if existing is not None:
                return _join_result(session, existing)
            descriptor = await self.gateway.create_attendee(session_id, user_id)
            attendee = Attendee(
                user_id=user_id,
                display_name=display_name or user_id,
                joined_at=self.clock(),
                descriptor=descriptor,
            )
            session.attendees[user_id] = attendee
            _logger.info("User %s joined session %s", user_id, session_id)
            return _join_result(session, attendee)

    async def remove(self, session_id: str) -> None:
        """Delete the provider meeting best-effort, then drop the session."""
        async with self.locked(session_id):
            try:
                await self.gateway.delete_meeting(session_id)
            except GatewayError as exc:
                _logger.warning(
                    "Provider delete failed for session %s, removing locally: %s",
                    session_id,
                    exc,
                )
            finally:
                self._sessions.pop(session_id, None)
                self._locks.pop(session_id, None)
        _logger.info("Session removed: id=%s", session_id)


def _project(session: Session) -> SessionProjection:
    return SessionProjection(
        id=session.id,
        meeting=dict(session.meeting.raw),
        created_at=session.created_at,
        attendee_count=len(session.attendees),
        transcription=session.transcription,
    )


def _join_result(session: Session, attendee: Attendee) -> JoinResult:
    return JoinResult(
        session=_project(session),
        attendee=attendee,
        is_creator=session.creator_id is not None
        and attendee.user_id == session.creator_id,
    )
