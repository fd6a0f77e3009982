"""Remote meeting provider gateway."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from meeting_sessions.domain.errors import GatewayError
from meeting_sessions.domain.provider import (
    AttendeeDescriptor,
    MaskingPolicy,
    MeetingDescriptor,
    MeetingStatus,
)

_AUTHORIZATION_STATUS_CODES = frozenset({401, 403})
_AUTHORIZATION_ERROR_CODES = frozenset(
    {"AccessDeniedException", "ForbiddenException", "UnauthorizedClientException"}
)
_AUTHORIZATION_PHRASES = ("access denied", "not authorized")


class MeetingGateway(Protocol):
    """Interface for the remote meeting provider."""

    async def create_meeting(
        self, request_token: str, region: str, external_id: str
    ) -> MeetingDescriptor:
        """Create a meeting and return its descriptor."""

    async def create_attendee(
        self, meeting_id: str, external_user_id: str
    ) -> AttendeeDescriptor:
        """Create an attendee for a meeting and return its credentials."""

    async def get_meeting(self, meeting_id: str) -> MeetingStatus:
        """Return the provider's current view of a meeting."""

    async def delete_meeting(self, meeting_id: str) -> None:
        """Delete a meeting on the provider side."""

    async def start_transcription(
        self,
        meeting_id: str,
        locale_code: str,
        region: str,
        masking_policy: MaskingPolicy,
    ) -> None:
        """Start provider-managed transcription for a meeting."""

    async def stop_transcription(self, meeting_id: str) -> None:
        """Stop provider-managed transcription for a meeting."""

    async def verify_access(self) -> None:
        """Probe the provider with a cheap read to validate credentials."""

    async def verify_transcription_access(self) -> None:
        """Probe the transcription service with a cheap read."""


@dataclass
class HttpxMeetingGateway(MeetingGateway):
    """Meeting gateway speaking the provider's REST API over httpx."""

    base_url: str
    api_key: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(
        cls, base_url: str, api_key: str, timeout_seconds: float = 10.0
    ) -> "HttpxMeetingGateway":
        """Create a gateway with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            api_key=api_key,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def create_meeting(
        self, request_token: str, region: str, external_id: str
    ) -> MeetingDescriptor:
        """Create a meeting via POST /meetings."""
        payload = await self._send(
            "create_meeting",
            "POST",
            "/meetings",
            json={
                "ClientRequestToken": request_token,
                "MediaRegion": region,
                "ExternalMeetingId": external_id,
            },
        )
        meeting = _section(payload, "Meeting", "create_meeting")
        meeting_id = meeting.get("MeetingId")
        if not isinstance(meeting_id, str) or not meeting_id:
            raise GatewayError(
                "Provider response is missing MeetingId", operation="create_meeting"
            )
        return MeetingDescriptor(
            meeting_id=meeting_id,
            external_meeting_id=_optional_str(meeting.get("ExternalMeetingId")),
            raw=meeting,
        )

    async def create_attendee(
        self, meeting_id: str, external_user_id: str
    ) -> AttendeeDescriptor:
        """Create an attendee via POST /meetings/{id}/attendees."""
        payload = await self._send(
            "create_attendee",
            "POST",
            f"/meetings/{meeting_id}/attendees",
            json={"ExternalUserId": external_user_id},
        )
        attendee = _section(payload, "Attendee", "create_attendee")
        attendee_id = attendee.get("AttendeeId")
        if not isinstance(attendee_id, str) or not attendee_id:
            raise GatewayError(
                "Provider response is missing AttendeeId", operation="create_attendee"
            )
        return AttendeeDescriptor(
            external_user_id=str(attendee.get("ExternalUserId", external_user_id)),
            raw=attendee,
        )

    async def get_meeting(self, meeting_id: str) -> MeetingStatus:
        """Fetch a meeting via GET /meetings/{id}."""
        payload = await self._send("get_meeting", "GET", f"/meetings/{meeting_id}")
        meeting = _section(payload, "Meeting", "get_meeting")
        return MeetingStatus(
            meeting_id=str(meeting.get("MeetingId", meeting_id)),
            transcription_active=_transcription_status(meeting) == "Active",
            raw=meeting,
        )

    async def delete_meeting(self, meeting_id: str) -> None:
        """Delete a meeting via DELETE /meetings/{id}."""
        await self._send("delete_meeting", "DELETE", f"/meetings/{meeting_id}")

    async def start_transcription(
        self,
        meeting_id: str,
        locale_code: str,
        region: str,
        masking_policy: MaskingPolicy,
    ) -> None:
        """Start transcription via POST /meetings/{id}/transcription."""
        engine_settings: dict[str, object] = {
            "LanguageCode": locale_code,
            "Region": region,
            "VocabularyFilterMethod": masking_policy.vocabulary_filter_method,
        }
        if masking_policy.content_identification_type is not None:
            engine_settings["ContentIdentificationType"] = (
                masking_policy.content_identification_type
            )
        await self._send(
            "start_transcription",
            "POST",
            f"/meetings/{meeting_id}/transcription",
            params={"operation": "start"},
            json={
                "TranscriptionConfiguration": {
                    "EngineTranscribeSettings": engine_settings
                }
            },
        )

    async def stop_transcription(self, meeting_id: str) -> None:
        """Stop transcription via POST /meetings/{id}/transcription."""
        await self._send(
            "stop_transcription",
            "POST",
            f"/meetings/{meeting_id}/transcription",
            params={"operation": "stop"},
        )

    async def verify_access(self) -> None:
        """List a single meeting to confirm the credentials are accepted."""
        await self._send(
            "verify_access", "GET", "/meetings", params={"max-results": 1}
        )

    async def verify_transcription_access(self) -> None:
        """List a single language model to confirm transcription access."""
        await self._send(
            "verify_transcription_access",
            "GET",
            "/transcription/language-models",
            params={"max-results": 1},
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _send(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: dict[str, object] | None = None,
        json: dict[str, object] | None = None,
    ) -> dict[str, object]:
        try:
            response = await self.http_client.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise GatewayError(
                str(exc) or type(exc).__name__, operation=operation
            ) from exc
        if response.is_error:
            raise _error_from_response(operation, response)
        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise GatewayError(
                "Provider returned a non-JSON response", operation=operation
            ) from exc
        return payload if isinstance(payload, dict) else {}


def _section(
    payload: dict[str, object], key: str, operation: str
) -> dict[str, object]:
    section = payload.get(key)
    if not isinstance(section, dict):
        raise GatewayError(f"Provider response is missing {key}", operation=operation)
    return section


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def _transcription_status(meeting: dict[str, object]) -> str | None:
    features = meeting.get("MeetingFeatures")
    if not isinstance(features, dict):
        return None
    transcription = features.get("Transcription")
    if not isinstance(transcription, dict):
        return None
    return _optional_str(transcription.get("Status"))


def _error_from_response(operation: str, response: httpx.Response) -> GatewayError:
    """Build a GatewayError, classifying authorization failures."""
    code, message = _error_details(response)
    if response.status_code in _AUTHORIZATION_STATUS_CODES:
        is_authorization_failure = True
    elif code is not None:
        is_authorization_failure = code in _AUTHORIZATION_ERROR_CODES
    else:
        lowered = message.lower()
        is_authorization_failure = any(
            phrase in lowered for phrase in _AUTHORIZATION_PHRASES
        )
    return GatewayError(
        f"{operation} failed with HTTP {response.status_code}: {message}",
        operation=operation,
        status_code=response.status_code,
        code=code,
        is_authorization_failure=is_authorization_failure,
    )


def _error_details(response: httpx.Response) -> tuple[str | None, str]:
    """Extract the provider error code and message from a failed response."""
    code: str | None = None
    message = response.reason_phrase or "error"
    header_code = response.headers.get("x-amzn-ErrorType")
    if header_code:
        code = header_code.split(":", maxsplit=1)[0]
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        body_code = body.get("Code") or body.get("__type")
        if isinstance(body_code, str) and body_code:
            code = body_code.rsplit("#", maxsplit=1)[-1]
        body_message = body.get("Message") or body.get("message")
        if isinstance(body_message, str) and body_message:
            message = body_message
    elif response.text:
        message = response.text
    return code, message
