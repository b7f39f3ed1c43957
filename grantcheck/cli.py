"""Command line entry point.

Usage:
    grantcheck validate [--operator-role PATH] [--manifest-dir DIR] [--role PATH ...]
    grantcheck audit [--operator-role PATH] [--format json]
    grantcheck suggest --role PATH [--operator-role PATH]

Exit codes: 0 on success, 1 when a role cannot be created with the
operator's permissions, 2 when manifests or configuration cannot be loaded.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from grantcheck.audit import (
    SEVERITY_WARNING,
    audit_rules,
    missing_required_resources,
)
from grantcheck.config import GrantCheckConfig, load_config
from grantcheck.exceptions import GrantCheckError
from grantcheck.logging_config import configure_logging
from grantcheck.report import build_report, format_report
from grantcheck.sources import (
    ManifestCatalog,
    ManifestRuleSource,
    load_grant_request,
)
from grantcheck.validator import RBACValidator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_COVERAGE_FAILURE = 1
EXIT_LOAD_ERROR = 2


def _validator(config: GrantCheckConfig) -> RBACValidator:
    """Build a validator from the operator role named in the config."""
    rules = ManifestRuleSource(config.operator_role_path).load_rules()
    return RBACValidator(rules, annotation_marker=config.annotation_marker)


def cmd_validate(args: argparse.Namespace, config: GrantCheckConfig) -> int:
    """Validate the catalog (or the --role manifests) against the operator role.

    Args:
        args: Parsed arguments (``role``, ``format``)
        config: Resolved configuration

    Returns:
        EXIT_OK if every role can be created, else EXIT_COVERAGE_FAILURE
    """
    validator = _validator(config)
    if args.role:
        requests = [load_grant_request(path) for path in args.role]
    else:
        requests = ManifestCatalog(config.manifest_dir).load_requests()

    report = build_report(validator, requests)
    if args.format == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(format_report(report))
    return EXIT_OK if report.ok else EXIT_COVERAGE_FAILURE


def cmd_audit(args: argparse.Namespace, config: GrantCheckConfig) -> int:
    """Print least-privilege findings for the operator role.

    Args:
        args: Parsed arguments (``format``)
        config: Resolved configuration

    Returns:
        EXIT_OK; findings are advisory
    """
    rules = ManifestRuleSource(config.operator_role_path).load_rules()
    findings = audit_rules(rules, config.dangerous_verbs)
    missing = missing_required_resources(rules)

    if args.format == "json":
        data = {
            "findings": [finding.model_dump() for finding in findings],
            "missing_resources": missing,
        }
        print(json.dumps(data, indent=2))
        return EXIT_OK

    for finding in findings:
        prefix = "WARNING" if finding.severity == SEVERITY_WARNING else "INFO"
        print(f"{prefix}: {finding.message}")
    for resource in missing:
        print(f"WARNING: Operator may be missing {resource} permissions")
    if not findings and not missing:
        print("No RBAC anti-patterns found")
    return EXIT_OK


def cmd_suggest(args: argparse.Namespace, config: GrantCheckConfig) -> int:
    """Print the annotations that would cover one role's missing rules.

    Args:
        args: Parsed arguments (``role``)
        config: Resolved configuration

    Returns:
        EXIT_OK
    """
    validator = _validator(config)
    request = load_grant_request(args.role)
    for suggestion in validator.suggest_annotations(
        validator.get_missing_permissions(request)
    ):
        print(suggestion)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="grantcheck",
        description="Check that an operator can create the roles it ships "
        "without privilege escalation.",
    )
    parser.add_argument("--log-level", default=None, help="Logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_operator_role(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--operator-role",
            default=None,
            help="Operator ClusterRole manifest (default: config/rbac/role.yaml)",
        )

    p_validate = sub.add_parser("validate", help="Validate role creation")
    add_operator_role(p_validate)
    p_validate.add_argument(
        "--manifest-dir", default=None, help="Base directory of the role catalog"
    )
    p_validate.add_argument(
        "--role",
        action="append",
        default=[],
        help="Role manifest to check (repeatable); overrides the catalog",
    )
    p_validate.add_argument("--format", choices=["text", "json"], default="text")
    p_validate.set_defaults(func=cmd_validate)

    p_audit = sub.add_parser("audit", help="Check operator rules for anti-patterns")
    add_operator_role(p_audit)
    p_audit.add_argument("--format", choices=["text", "json"], default="text")
    p_audit.set_defaults(func=cmd_audit)

    p_suggest = sub.add_parser("suggest", help="Print annotations for one role")
    add_operator_role(p_suggest)
    p_suggest.add_argument("--role", required=True, help="Role manifest")
    p_suggest.set_defaults(func=cmd_suggest)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line.

    Args:
        argv: Arguments without the program name; defaults to sys.argv

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(
            log_level=args.log_level,
            operator_role_path=args.operator_role,
            manifest_dir=getattr(args, "manifest_dir", None),
        )
        configure_logging(config.log_level)
        return args.func(args, config)
    except GrantCheckError as e:
        logger.error(e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_LOAD_ERROR


if __name__ == "__main__":
    sys.exit(main())
