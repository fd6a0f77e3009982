"""Pydantic models for inbound API payloads."""

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateMeetingRequest(_CamelModel):
    """Create meeting payload."""

    user_id: str | None = Field(default=None, alias="userId")


class MeetingRequest(_CamelModel):
    """Payload addressing a single meeting."""

    meeting_id: str = Field(alias="meetingId", min_length=1)


class JoinMeetingRequest(MeetingRequest):
    """Join meeting payload."""

    user_id: str = Field(alias="userId", min_length=1)
    user_name: str | None = Field(default=None, alias="userName")


class StartTranscriptionRequest(MeetingRequest):
    """Start transcription payload."""

    language: str | None = None
    region: str | None = None
