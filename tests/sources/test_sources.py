"""Tests for manifest-backed rule and request sources."""

import pytest

from grantcheck.exceptions import ManifestError
from grantcheck.models import PolicyRule
from grantcheck.sources import (
    DEFAULT_ROLE_CATALOG,
    ManifestCatalog,
    ManifestRuleSource,
    load_grant_request,
    load_granted_rules,
    parse_manifests,
)

ROLE_YAML = """\
apiVersion: rbac.authorization.k8s.io/v1
kind: Role
metadata:
  name: {name}
  namespace: cert-manager
rules:
  - apiGroups: [""]
    resources: [configmaps]
    verbs: [get]
"""

DEPLOYMENT_YAML = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: web
"""


class TestParseManifests:
    """Test YAML parsing."""

    def test_multiple_documents(self):
        """Test documents are returned in order, empty ones skipped."""
        text = ROLE_YAML.format(name="one") + "---\n---\n" + DEPLOYMENT_YAML
        docs = parse_manifests(text)
        assert [d["metadata"]["name"] for d in docs] == ["one", "web"]

    def test_invalid_yaml(self):
        """Test broken YAML raises ManifestError with the origin."""
        with pytest.raises(ManifestError) as exc_info:
            parse_manifests("rules: [unclosed", path="broken.yaml")
        assert exc_info.value.path == "broken.yaml"
        assert "invalid YAML" in exc_info.value.message

    def test_non_mapping_document(self):
        """Test a scalar document is rejected."""
        with pytest.raises(ManifestError, match="expected a mapping"):
            parse_manifests("just a string")


class TestLoadGrantRequest:
    """Test loading a single role manifest."""

    def test_load_role(self, fixtures_dir):
        """Test the token request role fixture."""
        request = load_grant_request(fixtures_dir / "cert-manager-tokenrequest-role.yaml")

        assert request.name == "cert-manager-tokenrequest"
        assert request.namespace == "cert-manager"
        assert request.rules == (
            PolicyRule(
                apiGroups=[""],
                resources=["serviceaccounts/token"],
                resourceNames=["cert-manager"],
                verbs=["create"],
            ),
        )

    def test_missing_file(self, tmp_path):
        """Test an unreadable path raises ManifestError."""
        with pytest.raises(ManifestError):
            load_grant_request(tmp_path / "nope.yaml")

    def test_empty_file(self, write_manifest):
        """Test a file without documents raises ManifestError."""
        path = write_manifest("empty.yaml", "")
        with pytest.raises(ManifestError, match="no documents"):
            load_grant_request(path)

    def test_wrong_kind(self, write_manifest):
        """Test a Deployment is not a grant request."""
        path = write_manifest("deploy.yaml", DEPLOYMENT_YAML)
        with pytest.raises(ManifestError, match="Unsupported manifest kind"):
            load_grant_request(path)


class TestLoadGrantedRules:
    """Test loading granted rules."""

    def test_cluster_role(self, fixtures_dir):
        """Test all rules of the operator ClusterRole are loaded."""
        rules = load_granted_rules(fixtures_dir / "operator-role.yaml")
        assert len(rules) == 3
        assert rules[1].resources == ("serviceaccounts/token",)

    def test_skips_non_rbac_documents(self, write_manifest):
        """Test rules are concatenated across RBAC documents only."""
        text = (
            ROLE_YAML.format(name="one")
            + "---\n"
            + DEPLOYMENT_YAML
            + "---\n"
            + ROLE_YAML.format(name="two")
        )
        rules = load_granted_rules(write_manifest("bundle.yaml", text))
        assert len(rules) == 2

    def test_malformed_cluster_role_is_an_error(self, write_manifest):
        """Test a broken ClusterRole is reported instead of being dropped."""
        text = (
            "kind: ClusterRole\n"
            "metadata:\n  name: a\n"
            "rules:\n"
            "  - apiGroups: ['']\n"
            "    resources: [pods]\n"
            "    verbs: [get]\n"
            "---\n"
            "kind: ClusterRole\n"
            "metadata:\n  name: b\n"
            "rules:\n"
            "  - apiGroups: ['']\n"
            "    resources: serviceaccounts/token\n"
            "    verbs: [create]\n"
        )
        path = write_manifest("operator-role.yaml", text)

        with pytest.raises(ManifestError) as exc_info:
            load_granted_rules(path)

        assert exc_info.value.path == str(path)
        assert "Invalid ClusterRole manifest 'b'" in exc_info.value.message

    def test_single_malformed_cluster_role_is_not_reported_missing(
        self, write_manifest
    ):
        """Test a lone broken ClusterRole gives its own error."""
        path = write_manifest(
            "operator-role.yaml",
            "kind: ClusterRole\nmetadata:\n  name: b\nrules:\n  - verbs: 5\n",
        )
        with pytest.raises(ManifestError) as exc_info:
            load_granted_rules(path)
        assert "no Role or ClusterRole" not in exc_info.value.message

    def test_no_rbac_documents(self, write_manifest):
        """Test a file without roles raises ManifestError."""
        with pytest.raises(ManifestError, match="no Role or ClusterRole"):
            load_granted_rules(write_manifest("deploy.yaml", DEPLOYMENT_YAML))

    def test_rule_source(self, fixtures_dir):
        """Test ManifestRuleSource wraps the loader."""
        source = ManifestRuleSource(fixtures_dir / "operator-role-before-fix.yaml")
        assert len(source.load_rules()) == 2


class TestManifestCatalog:
    """Test the role catalog."""

    def test_default_entries(self, tmp_path):
        """Test the default catalog lists the operator's roles."""
        catalog = ManifestCatalog(tmp_path)
        assert [str(e) for e in catalog.entries] == list(DEFAULT_ROLE_CATALOG)

    def test_loads_in_order_and_skips_missing(self, tmp_path, write_manifest):
        """Test present entries load in catalog order, missing ones are skipped."""
        write_manifest("b/second-role.yaml", ROLE_YAML.format(name="second"))
        write_manifest("a/first-role.yaml", ROLE_YAML.format(name="first"))
        catalog = ManifestCatalog(
            tmp_path,
            ["b/second-role.yaml", "missing/role.yaml", "a/first-role.yaml"],
        )

        requests = catalog.load_requests()

        assert [r.name for r in requests] == ["second", "first"]

    def test_empty_catalog_when_nothing_present(self, tmp_path):
        """Test a base dir without manifests yields no requests."""
        assert ManifestCatalog(tmp_path).load_requests() == []

    def test_invalid_present_entry_raises(self, tmp_path, write_manifest):
        """Test a present but broken manifest is an error."""
        write_manifest("bad-role.yaml", "rules: [unclosed")
        with pytest.raises(ManifestError):
            ManifestCatalog(tmp_path, ["bad-role.yaml"]).load_requests()

    def test_discover(self, tmp_path, write_manifest):
        """Test discovery finds *-role.yaml files, sorted."""
        write_manifest("z/z-role.yaml", ROLE_YAML.format(name="z"))
        write_manifest("a/a-role.yaml", ROLE_YAML.format(name="a"))
        write_manifest("a/a-deployment.yaml", DEPLOYMENT_YAML)

        catalog = ManifestCatalog.discover(tmp_path)

        assert [r.name for r in catalog.load_requests()] == ["a", "z"]
