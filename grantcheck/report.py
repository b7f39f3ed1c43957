"""Aggregate coverage reports for a catalog of roles.

Runs the full workflow over every role: validate, collect the missing rules
of each failing role and render the annotations that would fix it.
"""

from typing import Any, Dict, Iterable, List

from pydantic import BaseModel, Field

from grantcheck.models import GrantRequest, PolicyRule
from grantcheck.validator import RBACValidator

REMEDIATION_HINT = (
    "Add the missing permissions to the operator's ClusterRole "
    "(config/rbac/role.yaml), regenerate manifests and re-run validation."
)


class RoleFinding(BaseModel):
    """Coverage failure details for one role."""

    role: str = Field(..., description="Name of the role that cannot be created")
    error: str = Field(..., description="Message for the first uncovered rule")
    missing: List[PolicyRule] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


class CoverageReport(BaseModel):
    """Result of validating a list of roles."""

    checked: List[str] = Field(default_factory=list)
    findings: List[RoleFinding] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when every checked role can be created."""
        return not self.findings

    @property
    def error_count(self) -> int:
        """Number of roles that cannot be created."""
        return len(self.findings)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the report for JSON output.

        Returns:
            Dictionary with ``ok``, ``checked``, ``errors`` (the count) and
            ``findings`` with rules in manifest form
        """
        return {
            "ok": self.ok,
            "checked": list(self.checked),
            "errors": self.error_count,
            "findings": [
                {
                    "role": finding.role,
                    "error": finding.error,
                    "missing": [rule.to_manifest() for rule in finding.missing],
                    "suggestions": list(finding.suggestions),
                }
                for finding in self.findings
            ],
        }


def build_report(
    validator: RBACValidator, requests: Iterable[GrantRequest]
) -> CoverageReport:
    """Validate every role and collect remediation details.

    Args:
        validator: Validator holding the granted rules
        requests: Roles to check, in order

    Returns:
        CoverageReport with one finding per failing role, in input order
    """
    report = CoverageReport()
    for request in requests:
        report.checked.append(request.name)
        error = validator.check_role_creation(request)
        if error is None:
            continue
        missing = validator.get_missing_permissions(request)
        report.findings.append(
            RoleFinding(
                role=request.name,
                error=error.message,
                missing=missing,
                suggestions=validator.suggest_annotations(missing),
            )
        )
    return report


def format_report(report: CoverageReport) -> str:
    """Render a report as plain text for terminals and CI logs."""
    if report.ok:
        return f"RBAC validation passed for {len(report.checked)} role(s)"

    lines = [f"RBAC validation failed with {report.error_count} error(s):"]
    for finding in report.findings:
        lines.append(f"  - {finding.error}")
    for finding in report.findings:
        lines.append(f"Missing permissions for role {finding.role}:")
        for suggestion in finding.suggestions:
            lines.append(f"  Add: {suggestion}")
    lines.append(REMEDIATION_HINT)
    return "\n".join(lines)


__all__ = [
    "RoleFinding",
    "CoverageReport",
    "build_report",
    "format_report",
    "REMEDIATION_HINT",
]
