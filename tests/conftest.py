"""Shared fixtures for the grantcheck test suite."""

import logging
from pathlib import Path

import pytest

from grantcheck.models import GrantRequest, PolicyRule

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def clean_grantcheck_env(monkeypatch):
    """Keep GRANTCHECK_* variables from the host out of the tests."""
    for var in (
        "GRANTCHECK_LOG_LEVEL",
        "GRANTCHECK_OPERATOR_ROLE",
        "GRANTCHECK_MANIFEST_DIR",
        "GRANTCHECK_ANNOTATION_MARKER",
        "GRANTCHECK_DANGEROUS_VERBS",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fixtures_dir():
    """Directory holding the sample RBAC manifests."""
    return FIXTURES_DIR


@pytest.fixture
def core_rules():
    """Operator rules without serviceaccounts/token."""
    return [
        PolicyRule(
            apiGroups=[""],
            resources=["serviceaccounts", "configmaps"],
            verbs=["get", "list", "create", "update", "patch", "delete"],
        )
    ]


@pytest.fixture
def token_rule():
    """Plain serviceaccounts/token create rule."""
    return PolicyRule(
        apiGroups=[""], resources=["serviceaccounts/token"], verbs=["create"]
    )


@pytest.fixture
def token_request_role():
    """The cert-manager token request role."""
    return GrantRequest(
        name="cert-manager-tokenrequest",
        namespace="cert-manager",
        rules=[
            PolicyRule(
                apiGroups=[""],
                resources=["serviceaccounts/token"],
                resourceNames=["cert-manager"],
                verbs=["create"],
            )
        ],
    )


@pytest.fixture
def write_manifest(tmp_path):
    """Write YAML text to a file under tmp_path and return its path."""

    def _write(relative: str, text: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def reset_grantcheck_logger():
    """Drop handlers installed by configure_logging after each test."""
    yield
    package_logger = logging.getLogger("grantcheck")
    for handler in list(package_logger.handlers):
        if getattr(handler, "_grantcheck_handler", False):
            package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
