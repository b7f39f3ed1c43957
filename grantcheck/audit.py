"""Least-privilege audit of a granted rule set.

Flags wildcard grants and verbs that allow destructive or escalating
actions. Findings are advisory: nothing here fails a validation.
"""

from typing import Iterable, List, Sequence

from pydantic import BaseModel, Field

from grantcheck.matching import WILDCARD
from grantcheck.models import PolicyRule

DEFAULT_DANGEROUS_VERBS = ("delete", "deletecollection", "escalate", "impersonate")
DEFAULT_REQUIRED_RESOURCES = ("serviceaccounts/token",)

SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"


class AuditFinding(BaseModel):
    """One audit observation about a granted rule."""

    severity: str = Field(..., description="warning or info")
    rule_index: int = Field(..., description="Position of the rule, -1 if none")
    message: str


def audit_rules(
    rules: Sequence[PolicyRule],
    dangerous_verbs: Iterable[str] = DEFAULT_DANGEROUS_VERBS,
) -> List[AuditFinding]:
    """Report wildcard and dangerous-verb grants.

    Args:
        rules: Granted rules to inspect
        dangerous_verbs: Verbs worth a second look

    Returns:
        Findings in rule order
    """
    dangerous = list(dangerous_verbs)
    findings: List[AuditFinding] = []

    for i, rule in enumerate(rules):
        if WILDCARD in rule.api_groups:
            findings.append(
                AuditFinding(
                    severity=SEVERITY_WARNING,
                    rule_index=i,
                    message=f"Rule {i} has wildcard API group '*' - "
                    "consider being more specific",
                )
            )
        if WILDCARD in rule.resources:
            findings.append(
                AuditFinding(
                    severity=SEVERITY_WARNING,
                    rule_index=i,
                    message=f"Rule {i} has wildcard resource '*' - "
                    "consider being more specific",
                )
            )
        if WILDCARD in rule.verbs:
            findings.append(
                AuditFinding(
                    severity=SEVERITY_WARNING,
                    rule_index=i,
                    message=f"Rule {i} has wildcard verb '*' - "
                    "consider principle of least privilege",
                )
            )
        for verb in rule.verbs:
            if verb in dangerous:
                findings.append(
                    AuditFinding(
                        severity=SEVERITY_INFO,
                        rule_index=i,
                        message=f"Rule {i} has potentially dangerous permission "
                        f"'{verb}' - verify this is needed",
                    )
                )

    return findings


def missing_required_resources(
    rules: Sequence[PolicyRule],
    required: Iterable[str] = DEFAULT_REQUIRED_RESOURCES,
) -> List[str]:
    """Return required resource tokens that no rule names.

    Only the resource axis is inspected: a rule listing the token, or ``*``,
    counts as naming it.
    """
    return [
        resource
        for resource in required
        if not any(
            resource in rule.resources or WILDCARD in rule.resources for rule in rules
        )
    ]


__all__ = [
    "AuditFinding",
    "audit_rules",
    "missing_required_resources",
    "DEFAULT_DANGEROUS_VERBS",
    "DEFAULT_REQUIRED_RESOURCES",
    "SEVERITY_WARNING",
    "SEVERITY_INFO",
]
