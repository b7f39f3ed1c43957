"""Rule and request sources backed by Kubernetes RBAC manifests.

The validator itself does no I/O. These collaborators read persisted
Role/ClusterRole manifests and hand plain models to it.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

import yaml

from grantcheck.exceptions import ManifestError, ValidationError
from grantcheck.models import RBAC_KINDS, GrantRequest, PolicyRule

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Roles created by the cert-manager operator, relative to the manifest dir
DEFAULT_ROLE_CATALOG = (
    "cert-manager-deployment/controller/cert-manager-tokenrequest-role.yaml",
    "cert-manager-deployment/controller/cert-manager-leaderelection-role.yaml",
    "cert-manager-deployment/webhook/cert-manager-webhook-dynamic-serving-role.yaml",
    "cert-manager-deployment/cainjector/cert-manager-cainjector-leaderelection-role.yaml",
    "istio-csr/cert-manager-istio-csr-role.yaml",
    "istio-csr/cert-manager-istio-csr-leases-role.yaml",
)


class RuleSource(Protocol):
    """Supplies the granted rule set."""

    def load_rules(self) -> List[PolicyRule]:
        """Return the granted rules."""
        ...


class RequestSource(Protocol):
    """Supplies the grant requests to check."""

    def load_requests(self) -> List[GrantRequest]:
        """Return the grant requests, in catalog order."""
        ...


def parse_manifests(text: str, path: str = "<string>") -> List[Dict[str, Any]]:
    """Parse one or more YAML documents.

    Args:
        text: YAML text, possibly with ``---`` separated documents
        path: Origin used in error messages

    Returns:
        Non-empty documents in order

    Raises:
        ManifestError: If the YAML is invalid or a document is not a mapping
    """
    try:
        docs = [doc for doc in yaml.safe_load_all(text) if doc is not None]
    except yaml.YAMLError as e:
        raise ManifestError(path, f"invalid YAML: {e}") from e

    for doc in docs:
        if not isinstance(doc, dict):
            raise ManifestError(
                path, f"expected a mapping, got {type(doc).__name__}"
            )
    return docs


def _read_documents(path: PathLike) -> List[Dict[str, Any]]:
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(str(file_path), str(e)) from e

    docs = parse_manifests(text, str(file_path))
    if not docs:
        raise ManifestError(str(file_path), "no documents found")
    return docs


def _to_grant_request(doc: Dict[str, Any], path: PathLike) -> GrantRequest:
    try:
        return GrantRequest.from_manifest(doc)
    except ValidationError as e:
        raise ManifestError(str(path), e.message, details=e.details) from e


def load_grant_request(path: PathLike) -> GrantRequest:
    """Load a Role or ClusterRole manifest as a grant request.

    Only the first document is used.

    Raises:
        ManifestError: If the file cannot be read or is not an RBAC role
    """
    return _to_grant_request(_read_documents(path)[0], path)


def load_granted_rules(path: PathLike) -> List[PolicyRule]:
    """Load the rules of a persisted (Cluster)Role manifest.

    Rules of every RBAC document in the file are concatenated. Documents of
    other kinds are skipped.

    Raises:
        ManifestError: If the file cannot be read, holds no RBAC role, or an
            RBAC document is malformed
    """
    rules: List[PolicyRule] = []
    found = False
    for doc in _read_documents(path):
        kind = doc.get("kind", "Role")
        if kind not in RBAC_KINDS:
            logger.debug(f"Skipping {kind} document in {path}")
            continue
        found = True
        rules.extend(_to_grant_request(doc, path).rules)

    if not found:
        raise ManifestError(str(path), "no Role or ClusterRole document found")
    return rules


class ManifestRuleSource:
    """Granted rules read from a ClusterRole manifest on disk."""

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)

    def load_rules(self) -> List[PolicyRule]:
        rules = load_granted_rules(self.path)
        logger.info(f"Loaded {len(rules)} granted rule(s) from {self.path}")
        return rules


class ManifestCatalog:
    """Ordered catalog of role manifests the acting system intends to create.

    Entries are paths relative to ``base_dir``. Entries missing on disk are
    skipped, since not every build ships every role.
    """

    def __init__(
        self,
        base_dir: PathLike,
        entries: Optional[Sequence[PathLike]] = None,
    ) -> None:
        """Initialize the catalog.

        Args:
            base_dir: Directory the entries are relative to
            entries: Manifest paths; defaults to ``DEFAULT_ROLE_CATALOG``
        """
        self.base_dir = Path(base_dir)
        if entries is None:
            entries = DEFAULT_ROLE_CATALOG
        self.entries = [Path(entry) for entry in entries]

    @classmethod
    def discover(
        cls, base_dir: PathLike, pattern: str = "*-role.yaml"
    ) -> "ManifestCatalog":
        """Build a catalog from every matching file under ``base_dir``."""
        base = Path(base_dir)
        entries = sorted(
            p.relative_to(base) for p in base.rglob(pattern) if p.is_file()
        )
        return cls(base, entries)

    def load_requests(self) -> List[GrantRequest]:
        """Load every present entry, in catalog order.

        Raises:
            ManifestError: If a present entry cannot be parsed
        """
        requests: List[GrantRequest] = []
        for entry in self.entries:
            path = entry if entry.is_absolute() else self.base_dir / entry
            if not path.is_file():
                logger.info(f"Skipping {entry}: file not found")
                continue
            requests.append(load_grant_request(path))
        return requests


__all__ = [
    "RuleSource",
    "RequestSource",
    "ManifestRuleSource",
    "ManifestCatalog",
    "DEFAULT_ROLE_CATALOG",
    "parse_manifests",
    "load_grant_request",
    "load_granted_rules",
]
