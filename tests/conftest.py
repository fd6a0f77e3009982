"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from meeting_sessions.adapters.meeting_gateway import MeetingGateway
from meeting_sessions.config import Settings
from meeting_sessions.containers import AppContainer, build_services
from meeting_sessions.domain.errors import GatewayError
from meeting_sessions.domain.provider import (
    AttendeeDescriptor,
    MaskingPolicy,
    MeetingDescriptor,
    MeetingStatus,
)


@dataclass
class ManualClock:
    """Clock that only moves when a test advances it."""

    now: datetime = field(default_factory=lambda: datetime(2024, 5, 1, 12, tzinfo=UTC))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def authorization_error(operation: str = "start_transcription") -> GatewayError:
    return GatewayError(
        "User is not authorized to perform this action",
        operation=operation,
        status_code=403,
        code="AccessDeniedException",
        is_authorization_failure=True,
    )


def provider_error(operation: str) -> GatewayError:
    return GatewayError("Service unavailable", operation=operation, status_code=503)


@dataclass
class FakeMeetingGateway(MeetingGateway):
    """In-memory provider that records calls and can fail on demand."""

    calls: list[tuple[str, ...]] = field(default_factory=list)
    meetings: dict[str, dict[str, object]] = field(default_factory=dict)
    failures: dict[str, GatewayError] = field(default_factory=dict)
    blockers: dict[str, asyncio.Event] = field(default_factory=dict)
    transcribing: set[str] = field(default_factory=set)
    last_masking_policy: MaskingPolicy | None = None
    _counter: int = 0

    def calls_to(self, operation: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == operation]

    async def _enter(self, operation: str, *args: str) -> None:
        self.calls.append((operation, *args))
        blocker = self.blockers.get(operation)
        if blocker is not None:
            await blocker.wait()
        failure = self.failures.get(operation)
        if failure is not None:
            raise failure

    async def create_meeting(
        self, request_token: str, region: str, external_id: str
    ) -> MeetingDescriptor:
        await self._enter("create_meeting", request_token, region, external_id)
        self._counter += 1
        meeting_id = f"meeting-{self._counter}"
        raw: dict[str, object] = {
            "MeetingId": meeting_id,
            "ExternalMeetingId": external_id,
            "MediaRegion": region,
            "MediaPlacement": {"AudioHostUrl": f"audio.example/{meeting_id}"},
        }
        self.meetings[meeting_id] = raw
        return MeetingDescriptor(
            meeting_id=meeting_id,
            external_meeting_id=external_id,
            raw=raw,
        )

    async def create_attendee(
        self, meeting_id: str, external_user_id: str
    ) -> AttendeeDescriptor:
        await self._enter("create_attendee", meeting_id, external_user_id)
        attendee_id = f"attendee-{len(self.calls_to('create_attendee'))}"
        return AttendeeDescriptor(
            external_user_id=external_user_id,
            raw={
                "AttendeeId": attendee_id,
                "ExternalUserId": external_user_id,
                "JoinToken": f"token-{attendee_id}",
            },
        )

    async def get_meeting(self, meeting_id: str) -> MeetingStatus:
        await self._enter("get_meeting", meeting_id)
        return MeetingStatus(
            meeting_id=meeting_id,
            transcription_active=meeting_id in self.transcribing,
            raw=self.meetings.get(meeting_id, {}),
        )

    async def delete_meeting(self, meeting_id: str) -> None:
        await self._enter("delete_meeting", meeting_id)
        self.meetings.pop(meeting_id, None)

    async def start_transcription(
        self,
        meeting_id: str,
        locale_code: str,
        region: str,
        masking_policy: MaskingPolicy,
    ) -> None:
        await self._enter("start_transcription", meeting_id, locale_code, region)
        self.last_masking_policy = masking_policy
        self.transcribing.add(meeting_id)

    async def stop_transcription(self, meeting_id: str) -> None:
        await self._enter("stop_transcription", meeting_id)
        self.transcribing.discard(meeting_id)

    async def verify_access(self) -> None:
        await self._enter("verify_access")

    async def verify_transcription_access(self) -> None:
        await self._enter("verify_transcription_access")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        provider_base_url="https://meetings.example.test",
        provider_api_key="provider-key",
        admin_token="admin-token",
        reaper_enabled=False,
        environment="local",
    )


@pytest.fixture
def gateway() -> FakeMeetingGateway:
    return FakeMeetingGateway()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def container(
    settings: Settings, gateway: FakeMeetingGateway, clock: ManualClock
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return build_services(settings, gateway, close_resources, clock=clock)
