"""Configuration for grantcheck.

Settings come from environment variables with defaults; explicit keyword
overrides win over the environment.

Environment Variables:
    GRANTCHECK_LOG_LEVEL: Log level name (default: "WARNING")
    GRANTCHECK_OPERATOR_ROLE: Operator ClusterRole manifest
        (default: "config/rbac/role.yaml")
    GRANTCHECK_MANIFEST_DIR: Directory holding role manifests (default: "bindata")
    GRANTCHECK_ANNOTATION_MARKER: Prefix of suggested annotations
        (default: "//+kubebuilder:")
    GRANTCHECK_DANGEROUS_VERBS: Comma-separated verbs flagged by the audit
        (default: "delete,deletecollection,escalate,impersonate")
"""

import logging
import os
from typing import Any, List

from pydantic import BaseModel, Field, field_validator

from grantcheck.audit import DEFAULT_DANGEROUS_VERBS
from grantcheck.exceptions import InvalidConfigurationError
from grantcheck.formatting import DEFAULT_ANNOTATION_MARKER

logger = logging.getLogger(__name__)

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_OPERATOR_ROLE = "config/rbac/role.yaml"
DEFAULT_MANIFEST_DIR = "bindata"


class GrantCheckConfig(BaseModel):
    """Runtime configuration for the CLI and report helpers."""

    log_level: str = DEFAULT_LOG_LEVEL
    operator_role_path: str = DEFAULT_OPERATOR_ROLE
    manifest_dir: str = DEFAULT_MANIFEST_DIR
    annotation_marker: str = DEFAULT_ANNOTATION_MARKER
    dangerous_verbs: List[str] = Field(
        default_factory=lambda: list(DEFAULT_DANGEROUS_VERBS)
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        name = value.strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise InvalidConfigurationError(
                "log_level", value, "not a logging level name"
            )
        return name

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


def _split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_config(**overrides: Any) -> GrantCheckConfig:
    """Build the configuration from environment variables and overrides.

    Args:
        **overrides: Field values that take precedence; ``None`` is ignored

    Returns:
        GrantCheckConfig instance
    """
    log_level = os.getenv("GRANTCHECK_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    if not isinstance(logging.getLevelName(log_level.strip().upper()), int):
        logger.warning(
            f"Invalid log level: {log_level}, using {DEFAULT_LOG_LEVEL}"
        )
        log_level = DEFAULT_LOG_LEVEL

    values = {
        "log_level": log_level,
        "operator_role_path": os.getenv(
            "GRANTCHECK_OPERATOR_ROLE", DEFAULT_OPERATOR_ROLE
        ),
        "manifest_dir": os.getenv("GRANTCHECK_MANIFEST_DIR", DEFAULT_MANIFEST_DIR),
        "annotation_marker": os.getenv(
            "GRANTCHECK_ANNOTATION_MARKER", DEFAULT_ANNOTATION_MARKER
        ),
    }

    dangerous = os.getenv("GRANTCHECK_DANGEROUS_VERBS")
    if dangerous is not None:
        values["dangerous_verbs"] = _split_list(dangerous)

    values.update({k: v for k, v in overrides.items() if v is not None})
    return GrantCheckConfig(**values)


__all__ = ["GrantCheckConfig", "load_config"]
