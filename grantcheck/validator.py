"""Permission-coverage validator.

``RBACValidator`` answers one question: can an actor holding a set of
granted rules create (or delegate) a role with a given set of requested
rules without escalating privileges? It replicates RBAC matching: per-axis
wildcards, literal sub-resource tokens and the resource-name restriction.

Example:
    >>> validator = RBACValidator(operator_role.rules)
    >>> errors = validator.validate_all_roles(roles)
    >>> for role in roles:
    ...     missing = validator.get_missing_permissions(role)
    ...     print(validator.suggest_annotations(missing))
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from grantcheck.exceptions import PrivilegeEscalationError
from grantcheck.formatting import DEFAULT_ANNOTATION_MARKER, render_annotations
from grantcheck.matching import rule_covers
from grantcheck.models import GrantRequest, PolicyRule


class RBACValidator:
    """Check requested rules against an immutable set of granted rules.

    The granted rules are copied at construction, so the instance can be
    shared between callers for read-only use.
    """

    def __init__(
        self,
        granted_rules: Optional[Iterable[PolicyRule]] = None,
        annotation_marker: str = DEFAULT_ANNOTATION_MARKER,
    ) -> None:
        """Initialize the validator.

        Args:
            granted_rules: Rules held by the acting system. ``None`` or an
                empty list means nothing is granted.
            annotation_marker: Prefix used by ``suggest_annotations``
        """
        self._granted: Tuple[PolicyRule, ...] = tuple(
            rule.model_copy(deep=True) for rule in granted_rules or ()
        )
        self.annotation_marker = annotation_marker

    @property
    def granted_rules(self) -> Tuple[PolicyRule, ...]:
        """Granted rules held by this validator."""
        return self._granted

    def can_grant(self, rule: PolicyRule) -> bool:
        """Check whether any granted rule covers the requested rule.

        Args:
            rule: Requested rule

        Returns:
            True if some granted rule covers it
        """
        return any(rule_covers(granted, rule) for granted in self._granted)

    def check_role_creation(
        self, request: GrantRequest
    ) -> Optional[PrivilegeEscalationError]:
        """Check a grant request without raising.

        Args:
            request: Role to be created

        Returns:
            Error for the first uncovered rule, or None if all are covered
        """
        for rule in request.rules:
            if not self.can_grant(rule):
                return PrivilegeEscalationError(
                    request.name, rule.model_copy(deep=True)
                )
        return None

    def validate_role_creation(self, request: GrantRequest) -> None:
        """Validate that a role can be created without privilege escalation.

        Args:
            request: Role to be created

        Raises:
            PrivilegeEscalationError: For the first uncovered rule, in order
        """
        error = self.check_role_creation(request)
        if error is not None:
            raise error

    def validate_all_roles(
        self, requests: Iterable[GrantRequest]
    ) -> List[PrivilegeEscalationError]:
        """Validate several roles.

        Args:
            requests: Roles to be created, in order

        Returns:
            One error per failing role, in input order. Empty on success.
        """
        errors: List[PrivilegeEscalationError] = []
        for request in requests:
            error = self.check_role_creation(request)
            if error is not None:
                errors.append(error)
        return errors

    def get_missing_permissions(self, request: GrantRequest) -> List[PolicyRule]:
        """Return every requested rule that no granted rule covers.

        Rules are returned verbatim (resource names included) and in input
        order. Identical rules are not merged.

        Args:
            request: Role to be created

        Returns:
            Copies of the uncovered rules
        """
        return [
            rule.model_copy(deep=True)
            for rule in request.rules
            if not self.can_grant(rule)
        ]

    def suggest_annotations(self, missing_rules: Sequence[PolicyRule]) -> List[str]:
        """Render the RBAC markers that would request the missing rules.

        Args:
            missing_rules: Rules as returned by ``get_missing_permissions``

        Returns:
            One annotation string per rule
        """
        return render_annotations(missing_rules, self.annotation_marker)

    suggest_kubebuilder_annotation = suggest_annotations


__all__ = ["RBACValidator"]
