"""
grantcheck - RBAC privilege-escalation checker.

grantcheck decides whether an actor holding a set of granted RBAC rules can
create, or delegate, a role with another set of rules without escalating
privileges. It replicates RBAC matching semantics: per-attribute wildcards,
literal sub-resource tokens and the resource-name restriction.

Main Exports:
    Models:
        - PolicyRule: One authorization rule
        - GrantRequest: Named set of rules to be created

    Validation:
        - RBACValidator: Coverage engine
        - build_report / CoverageReport: Aggregate results with suggestions
        - audit_rules: Least-privilege checks on a granted rule set

    Rendering:
        - render_annotation: Rule to RBAC marker annotation
        - format_policy_rule: Rule to error-message text

Example:
    >>> from grantcheck import PolicyRule, GrantRequest, RBACValidator
    >>> validator = RBACValidator([
    ...     PolicyRule(apiGroups=[""], resources=["serviceaccounts"], verbs=["create"]),
    ... ])
    >>> role = GrantRequest(name="tokenrequest", rules=[
    ...     PolicyRule(apiGroups=[""], resources=["serviceaccounts/token"], verbs=["create"]),
    ... ])
    >>> validator.suggest_annotations(validator.get_missing_permissions(role))
    ['//+kubebuilder:rbac:groups="",resources=serviceaccounts/token,verbs=create']
"""

__version__ = "0.1.0"

from . import exceptions
from .audit import AuditFinding, audit_rules, missing_required_resources
from .config import GrantCheckConfig, load_config
from .exceptions import (
    GrantCheckError,
    InvalidConfigurationError,
    ManifestError,
    PrivilegeEscalationError,
    ValidationError,
)
from .formatting import format_policy_rule, render_annotation, render_annotations
from .matching import WILDCARD, resource_names_covered, rule_covers, values_covered
from .models import GrantRequest, PolicyRule
from .report import CoverageReport, RoleFinding, build_report, format_report
from .validator import RBACValidator

__all__ = [
    "__version__",
    "exceptions",
    "PolicyRule",
    "GrantRequest",
    "RBACValidator",
    "CoverageReport",
    "RoleFinding",
    "build_report",
    "format_report",
    "AuditFinding",
    "audit_rules",
    "missing_required_resources",
    "GrantCheckConfig",
    "load_config",
    "format_policy_rule",
    "render_annotation",
    "render_annotations",
    "WILDCARD",
    "values_covered",
    "resource_names_covered",
    "rule_covers",
    "GrantCheckError",
    "ValidationError",
    "InvalidConfigurationError",
    "ManifestError",
    "PrivilegeEscalationError",
]
