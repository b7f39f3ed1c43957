"""Render policy rules as text: error messages and RBAC marker annotations."""

from typing import List, Sequence

from grantcheck.models import PolicyRule

DEFAULT_ANNOTATION_MARKER = "//+kubebuilder:"
CORE_GROUP_TOKEN = '""'


def _join(values: Sequence[str]) -> str:
    return ";".join(values)


def _bracket(values: Sequence[str]) -> str:
    return "[" + " ".join(v if v else CORE_GROUP_TOKEN for v in values) + "]"


def format_policy_rule(rule: PolicyRule) -> str:
    """Format a rule for error messages.

    Args:
        rule: Rule to format

    Returns:
        String like ``APIGroups:[""] Resources:[pods] Verbs:[get list]``
    """
    return (
        f"APIGroups:{_bracket(rule.api_groups)} "
        f"Resources:{_bracket(rule.resources)} "
        f"Verbs:{_bracket(rule.verbs)}"
    )


def render_annotation(
    rule: PolicyRule, marker: str = DEFAULT_ANNOTATION_MARKER
) -> str:
    """Render a rule as the RBAC marker a developer adds to request it.

    Values are joined with ``;`` in input order. An empty groups value is
    written as ``""`` (the core group). ``resourceNames`` is only emitted
    when the rule carries names.

    Args:
        rule: Rule to render
        marker: Prefix placed before ``rbac:``; empty for the bare form

    Returns:
        Annotation string
    """
    groups = _join(rule.api_groups) or CORE_GROUP_TOKEN
    annotation = (
        f"{marker}rbac:groups={groups},"
        f"resources={_join(rule.resources)},"
        f"verbs={_join(rule.verbs)}"
    )
    if rule.resource_names:
        annotation += f",resourceNames={_join(rule.resource_names)}"
    return annotation


def render_annotations(
    rules: Sequence[PolicyRule], marker: str = DEFAULT_ANNOTATION_MARKER
) -> List[str]:
    """Render one annotation per rule, in order."""
    return [render_annotation(rule, marker) for rule in rules]


__all__ = [
    "DEFAULT_ANNOTATION_MARKER",
    "CORE_GROUP_TOKEN",
    "format_policy_rule",
    "render_annotation",
    "render_annotations",
]
