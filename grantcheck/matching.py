"""Coverage predicates for RBAC policy rules.

A granted rule covers a requested rule when it covers it on every axis at
once. Matching is literal string equality plus the ``*`` wildcard; there is
no hierarchy, so ``pods`` does not cover ``pods/exec``.
"""

from typing import Sequence

from grantcheck.models import PolicyRule

WILDCARD = "*"


def values_covered(available: Sequence[str], required: Sequence[str]) -> bool:
    """Check that every required value is available.

    Args:
        available: Values held by the granted rule
        required: Values asked for by the requested rule

    Returns:
        True if ``available`` contains ``*`` or each required value
    """
    if WILDCARD in available:
        return True
    return all(value in available for value in required)


def resource_names_covered(granted: Sequence[str], requested: Sequence[str]) -> bool:
    """Check the resource-name restriction of two rules.

    An empty granted list is unrestricted and covers any request, including
    a name-restricted one. A name-restricted grant only covers a request
    for all instances when it lists ``*``.

    Args:
        granted: ``resource_names`` of the granted rule
        requested: ``resource_names`` of the requested rule

    Returns:
        True if the granted names cover the requested names
    """
    if not granted:
        return True
    if not requested:
        return WILDCARD in granted
    return values_covered(granted, requested)


def rule_covers(granted: PolicyRule, requested: PolicyRule) -> bool:
    """Check whether one granted rule covers one requested rule."""
    return (
        values_covered(granted.api_groups, requested.api_groups)
        and values_covered(granted.resources, requested.resources)
        and values_covered(granted.verbs, requested.verbs)
        and resource_names_covered(granted.resource_names, requested.resource_names)
    )


__all__ = [
    "WILDCARD",
    "values_covered",
    "resource_names_covered",
    "rule_covers",
]
