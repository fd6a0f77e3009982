"""Domain models for meeting sessions."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from meeting_sessions.domain.provider import AttendeeDescriptor, MeetingDescriptor

NO_EXTERNAL_MEETING_ID = "no-external-id"


class TranscriptionMode(StrEnum):
    """Who is responsible for the running transcription."""

    OFF = "off"
    PROVIDER_MANAGED = "provider_managed"
    DEGRADED = "degraded"


class TranscriptionOutcome(StrEnum):
    """Result of a transcription start request."""

    OK = "ok"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class TranscriptionState:
    """Transcription bookkeeping for a session."""

    enabled: bool = False
    mode: TranscriptionMode = TranscriptionMode.OFF
    locale: str | None = None
    region: str | None = None

    def __post_init__(self) -> None:
        if self.enabled != (self.mode is not TranscriptionMode.OFF):
            raise ValueError(
                f"Inconsistent transcription state: enabled={self.enabled} "
                f"mode={self.mode}"
            )

    @classmethod
    def off(cls) -> "TranscriptionState":
        return cls()

    @classmethod
    def provider_managed(cls, locale: str, region: str) -> "TranscriptionState":
        return cls(
            enabled=True,
            mode=TranscriptionMode.PROVIDER_MANAGED,
            locale=locale,
            region=region,
        )

    @classmethod
    def degraded(
        cls, locale: str | None = None, region: str | None = None
    ) -> "TranscriptionState":
        return cls(
            enabled=True, mode=TranscriptionMode.DEGRADED, locale=locale, region=region
        )


@dataclass(frozen=True)
class Attendee:
    """A participant admitted into a session."""

    user_id: str
    display_name: str
    joined_at: datetime
    descriptor: AttendeeDescriptor


@dataclass
class Session:
    """A tracked meeting: local record plus provider metadata."""

    id: str
    meeting: MeetingDescriptor
    created_at: datetime
    creator_id: str | None
    attendees: dict[str, Attendee] = field(default_factory=dict)
    transcription: TranscriptionState = field(default_factory=TranscriptionState.off)

    @property
    def external_meeting_id(self) -> str:
        return self.meeting.external_meeting_id or NO_EXTERNAL_MEETING_ID


@dataclass(frozen=True)
class SessionSummary:
    """Lightweight listing entry for a live session."""

    id: str
    external_meeting_id: str
    created_at: datetime
    attendee_count: int
    transcription_enabled: bool


@dataclass(frozen=True)
class SessionProjection:
    """Session metadata that is safe to return to any caller."""

    id: str
    meeting: dict[str, object]
    created_at: datetime
    attendee_count: int
    transcription: TranscriptionState


@dataclass(frozen=True)
class JoinResult:
    """Outcome of admitting a user into a session."""

    session: SessionProjection
    attendee: Attendee
    is_creator: bool


@dataclass(frozen=True)
class TranscriptionResult:
    """Outcome of a transcription start request."""

    session_id: str
    outcome: TranscriptionOutcome
    state: TranscriptionState
    detail: str | None = None


@dataclass(frozen=True)
class TranscriptionStatus:
    """Local transcription state alongside the provider's view of it."""

    session_id: str
    local_enabled: bool
    mode: TranscriptionMode
    remote_enabled: bool | None
    checked_at: datetime
    remote_error: str | None = None
    remote_meeting: dict[str, object] | None = None
