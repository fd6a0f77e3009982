"""Provider permission diagnostics."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from meeting_sessions.adapters.meeting_gateway import MeetingGateway
from meeting_sessions.domain.errors import GatewayError
from meeting_sessions.domain.permissions import PermissionCheck, PermissionReport

_RECOMMENDATIONS = [
    "Verify that the provider API credentials are correct.",
    "Make sure the credentials are allowed to manage meetings and transcription.",
    "Use degraded transcription until the permission problem is resolved.",
]

_logger = logging.getLogger(__name__)


@dataclass
class ProviderPermissionService:
    """Probe the meeting provider and summarize permission problems."""

    gateway: MeetingGateway

    async def verify(self) -> PermissionReport:
        """Run the meetings and transcription probes and build a report."""
        results = [
            await _probe(
                "meetings",
                self.gateway.verify_access,
                "Credentials accepted for meeting management",
            ),
            await _probe(
                "transcription",
                self.gateway.verify_transcription_access,
                "Credentials accepted for transcription",
            ),
        ]
        has_issues = any(denied for _, denied in results)
        return PermissionReport(
            checks=[check for check, _ in results],
            has_permission_issues=has_issues,
            recommendations=list(_RECOMMENDATIONS) if has_issues else [],
        )


async def _probe(
    name: str, call: Callable[[], Awaitable[None]], success_details: str
) -> tuple[PermissionCheck, bool]:
    try:
        await call()
    except GatewayError as exc:
        _logger.warning("Provider %s access probe failed: %s", name, exc)
        check = PermissionCheck(name=name, status="error", details=str(exc))
        return check, exc.is_authorization_failure
    return PermissionCheck(name=name, status="success", details=success_details), False
