"""Domain models for provider permission checks."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PermissionCheck:
    """Result of probing one provider capability."""

    name: str
    status: str
    details: str


@dataclass(frozen=True)
class PermissionReport:
    """Aggregated provider permission diagnostics."""

    checks: list[PermissionCheck]
    has_permission_issues: bool
    recommendations: list[str]
