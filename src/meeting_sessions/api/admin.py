"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from meeting_sessions.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/permissions", dependencies=[Depends(require_admin)])
async def verify_permissions(request: Request) -> dict[str, object]:
    """Probe the meeting provider and report permission problems."""
    container: AppContainer = request.app.state.container
    report = await container.permission_service.verify()
    return {
        "permissionsCheck": {
            check.name: {"status": check.status, "details": check.details}
            for check in report.checks
        },
        "hasPermissionIssues": report.has_permission_issues,
        "recommendations": report.recommendations,
    }


@router.post("/reap", dependencies=[Depends(require_admin)])
async def reap_expired(request: Request) -> dict[str, object]:
    """Run one reaper cycle immediately."""
    container: AppContainer = request.app.state.container
    reaped = await container.reaper.run_cycle()
    return {"reaped": reaped}


@router.get("/sessions", dependencies=[Depends(require_admin)])
async def list_sessions(request: Request) -> dict[str, object]:
    """Return summaries of every live session."""
    container: AppContainer = request.app.state.container
    sessions = []
    for summary in container.registry.list_sessions():
        entry = asdict(summary)
        entry["created_at"] = summary.created_at.isoformat()
        sessions.append(entry)
    return {"sessions": sessions}
