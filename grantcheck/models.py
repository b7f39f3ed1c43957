"""Data models for authorization rules and grant requests."""

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from grantcheck.exceptions import ValidationError

RBAC_KINDS = ("Role", "ClusterRole")


class PolicyRule(BaseModel):
    """One authorization rule: API groups x resources x verbs.

    The four attributes are independent axes. ``resource_names`` narrows the
    rule to named instances; an empty list means every instance. Values keep
    their input order so a rule can be rendered back verbatim. Values are
    stored as tuples, so rules are immutable and hashable.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    api_groups: Tuple[str, ...] = Field(
        default_factory=tuple,
        alias="apiGroups",
        description='API groups ("" is the core group)',
    )
    resources: Tuple[str, ...] = Field(
        default_factory=tuple,
        description="Resource types, sub-resources as opaque 'base/sub' tokens",
    )
    verbs: Tuple[str, ...] = Field(
        default_factory=tuple, description="Allowed actions"
    )
    resource_names: Tuple[str, ...] = Field(
        default_factory=tuple,
        alias="resourceNames",
        description="Named instances; empty means all instances",
    )

    @field_validator(
        "api_groups", "resources", "verbs", "resource_names", mode="before"
    )
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        # Manifests and API objects use null for "not set"
        if value is None:
            return ()
        return value

    def to_manifest(self) -> Dict[str, Any]:
        """Dump the rule using Kubernetes manifest field names.

        Returns:
            Dictionary with camelCase keys; ``resourceNames`` only when set
        """
        data: Dict[str, Any] = {
            "apiGroups": list(self.api_groups),
            "resources": list(self.resources),
            "verbs": list(self.verbs),
        }
        if self.resource_names:
            data["resourceNames"] = list(self.resource_names)
        return data


class GrantRequest(BaseModel):
    """A named set of rules an actor intends to create, e.g. a Role."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Role name")
    namespace: Optional[str] = Field(default=None, description="Role namespace")
    kind: str = Field(default="Role", description="Role or ClusterRole")
    rules: Tuple[PolicyRule, ...] = Field(default_factory=tuple)

    @field_validator("rules", mode="before")
    @classmethod
    def _none_as_no_rules(cls, value: Any) -> Any:
        if value is None:
            return ()
        return value

    @classmethod
    def from_manifest(cls, doc: Dict[str, Any]) -> "GrantRequest":
        """Build a grant request from a parsed Role or ClusterRole manifest.

        Args:
            doc: Manifest dictionary (``kind``, ``metadata``, ``rules``)

        Returns:
            GrantRequest instance

        Raises:
            ValidationError: If the document is not an RBAC role or is malformed
        """
        if not isinstance(doc, dict):
            raise ValidationError(
                "Manifest document must be a mapping",
                details={"type": type(doc).__name__},
            )

        kind = doc.get("kind", "Role")
        if kind not in RBAC_KINDS:
            raise ValidationError(
                f"Unsupported manifest kind {kind!r}",
                details={"kind": kind, "supported": list(RBAC_KINDS)},
            )

        metadata = doc.get("metadata") or {}
        try:
            return cls(
                name=metadata.get("name", ""),
                namespace=metadata.get("namespace"),
                kind=kind,
                rules=doc.get("rules"),
            )
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {kind} manifest {metadata.get('name', '')!r}: {e}",
                details={"kind": kind, "errors": e.errors()},
            ) from e


__all__ = ["PolicyRule", "GrantRequest", "RBAC_KINDS"]
