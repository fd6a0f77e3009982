"""Typed views over meeting provider responses."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MeetingDescriptor:
    """Meeting metadata returned by the provider at creation."""

    meeting_id: str
    external_meeting_id: str | None = None
    raw: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class AttendeeDescriptor:
    """Attendee credentials returned by the provider for a single client."""

    external_user_id: str
    raw: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class MeetingStatus:
    """Live meeting state reported by the provider."""

    meeting_id: str
    transcription_active: bool
    raw: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class MaskingPolicy:
    """Content masking applied by the provider to transcripts."""

    vocabulary_filter_method: str = "mask"
    content_identification_type: str | None = None
