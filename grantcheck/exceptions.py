"""Exception hierarchy for grantcheck.

Every error raised by the library derives from ``GrantCheckError`` so callers
can catch a single type. Coverage failures (``PrivilegeEscalationError``) are
ordinary values in the aggregate APIs: they are returned, not raised.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from grantcheck.models import PolicyRule


class GrantCheckError(Exception):
    """Base exception for all grantcheck errors."""

    error_code = "grantcheck_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for machine-readable reports.

        Returns:
            Dictionary with error code, message and details
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(GrantCheckError):
    """Raised when an input object cannot be turned into a valid model."""

    error_code = "validation_error"


class InvalidConfigurationError(GrantCheckError):
    """Raised when a configuration value is not usable."""

    error_code = "invalid_configuration"

    def __init__(
        self,
        config_key: str,
        value: Any,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.config_key = config_key
        self.value = value
        self.reason = reason
        merged = {"config_key": config_key, "value": value}
        merged.update(details or {})
        super().__init__(f"Invalid {config_key} '{value}': {reason}", details=merged)


class ManifestError(GrantCheckError):
    """Raised when a role manifest cannot be read or understood."""

    error_code = "manifest_error"

    def __init__(
        self, path: str, reason: str, details: Optional[Dict[str, Any]] = None
    ):
        self.path = path
        self.reason = reason
        merged = {"path": path}
        merged.update(details or {})
        super().__init__(f"Cannot load manifest {path}: {reason}", details=merged)


class PrivilegeEscalationError(GrantCheckError):
    """A requested rule is not covered by the granted rules.

    Creating the role would hand out permissions the granting actor does
    not hold itself.
    """

    error_code = "privilege_escalation"

    def __init__(self, role_name: str, rule: "PolicyRule"):
        from grantcheck.formatting import format_policy_rule

        self.role_name = role_name
        self.rule = rule
        super().__init__(
            f"operator cannot create role {role_name}: missing permissions for "
            f"{format_policy_rule(rule)}",
            details={"role": role_name, "rule": rule.to_manifest()},
        )


__all__ = [
    "GrantCheckError",
    "ValidationError",
    "InvalidConfigurationError",
    "ManifestError",
    "PrivilegeEscalationError",
]
