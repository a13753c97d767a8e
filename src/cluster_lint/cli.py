"""
Command-line interface for cluster-lint.

Usage:
    cluster-lint run --snapshot dump.yaml                     # Lint mode, all checks
    cluster-lint run --snapshot dump.yaml --checks components
    cluster-lint run --snapshot dump.yaml \\
        --current-version 2.16.0 --target-version 3.0.0       # Upgrade assessment
    cluster-lint run --snapshot dump.yaml --output json
    cluster-lint plan --current-version 2.16.0 --target-version 3.0.0
    cluster-lint list --checks "workloads.*"
    cluster-lint --version

Exit codes:
    0  no blocking findings
    1  a fail-on policy triggered, or the run hit its deadline
    2  usage or configuration error
"""

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .check import Check, Target, parse_category, parse_version
from .checks import default_registry
from .config import LintConfig, find_config_file, load_config
from .errors import LintError
from .executor import ExecutionReport, Executor
from .reader import SnapshotReader, load_snapshot
from .reporter import OUTPUT_FORMATS, filter_by_severity, render
from .severity import Severity, parse_minimum_severity

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_USAGE = 2


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def resolve_config(args: argparse.Namespace) -> LintConfig:
    """
    Build the effective configuration: config file first, then CLI flags.

    Raises:
        ConfigError: If the file or any value is invalid
        ValueError: If a flag value cannot be parsed
    """
    config_path = Path(args.config) if getattr(args, "config", None) else find_config_file()
    config = load_config(config_path) if config_path else LintConfig()
    if config_path:
        logger.debug("Loaded configuration from %s", config_path)

    overrides = {}
    if getattr(args, "checks", None):
        overrides["selectors"] = list(args.checks)
    if getattr(args, "category", None):
        overrides["category"] = parse_category(args.category)
    if getattr(args, "output", None):
        overrides["output"] = args.output
    if getattr(args, "min_severity", None) is not None:
        overrides["min_severity"] = parse_minimum_severity(args.min_severity)
    if getattr(args, "fail_on_warning", False):
        overrides["fail_on_warning"] = True
    if getattr(args, "no_fail_on_critical", False):
        overrides["fail_on_critical"] = False
    if getattr(args, "timeout", None) is not None:
        overrides["timeout"] = args.timeout
    if getattr(args, "workers", None) is not None:
        overrides["max_workers"] = args.workers
    if getattr(args, "verbose", False):
        overrides["verbose"] = True
    if getattr(args, "describe", False):
        overrides["show_description"] = True
    if getattr(args, "current_version", None):
        overrides["current_version"] = parse_version(args.current_version)
    if getattr(args, "target_version", None):
        overrides["target_version"] = parse_version(args.target_version)

    if not overrides:
        return config
    return dataclasses.replace(config, **overrides)


def exit_code(config: LintConfig, report: ExecutionReport) -> int:
    """
    Apply the fail-on policy to a finished run.

    The policy sees the same results the output shows: findings hidden by
    min_severity never fail the run.
    """
    if report.incomplete:
        return EXIT_FINDINGS
    severities = {e.severity for e in filter_by_severity(report.executions, config.min_severity)}
    if config.fail_on_critical and Severity.CRITICAL in severities:
        return EXIT_FINDINGS
    if config.fail_on_warning and Severity.WARNING in severities:
        return EXIT_FINDINGS
    return EXIT_OK


def cmd_run(args: argparse.Namespace) -> int:
    """Run checks against a cluster snapshot."""
    try:
        config = resolve_config(args)
        reader = load_snapshot(args.snapshot)
    except (LintError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    def on_check_complete(check: Check, target: Target, result) -> None:
        where = target.describe()
        logger.debug(
            "%s %s%s", "DONE" if result is not None else "FAIL",
            check.check_id, f" ({where})" if where else "",
        )

    executor = Executor(
        default_registry(),
        reader,
        max_workers=config.max_workers,
        on_check_complete=on_check_complete,
    )

    try:
        report = executor.execute(
            selectors=config.selectors,
            category=config.category,
            current_version=config.current_version,
            target_version=config.target_version,
            timeout=config.timeout,
        )
    except LintError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    render(
        report,
        output_format=config.output,
        verbose=config.verbose,
        show_description=config.show_description,
        min_severity=config.min_severity,
    )
    return exit_code(config, report)


def cmd_plan(args: argparse.Namespace) -> int:
    """Show which checks would run for the selection and version pair."""
    try:
        config = resolve_config(args)
        executor = Executor(default_registry(), SnapshotReader())
        plan = executor.plan(
            selectors=config.selectors,
            category=config.category,
            current_version=config.current_version,
            target_version=config.target_version,
        )
    except (LintError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    if args.json:
        print(json.dumps(plan, indent=2))
        return EXIT_OK

    print("=" * 70)
    print("CLUSTER LINT PLAN")
    print("=" * 70)
    print()
    for check_id in plan["applicable"]:
        print(f"  [RUN ] {check_id}")
    for check_id in plan["skipped"]:
        print(f"  [SKIP] {check_id}")
    for check_id in plan["errors"]:
        print(f"  [ERR ] {check_id}")
    print()
    print(f"Applicable: {len(plan['applicable'])}  Skipped: {len(plan['skipped'])}")
    return EXIT_OK


def cmd_list(args: argparse.Namespace) -> int:
    """List registered checks."""
    try:
        config = resolve_config(args)
        executor = Executor(default_registry(), SnapshotReader())
        checks = executor.resolve(config.selectors, config.category)
    except (LintError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    if args.json:
        data = [
            {
                "id": check.check_id,
                "name": check.name,
                "category": check.category.value,
                "description": check.description,
            }
            for check in checks
        ]
        print(json.dumps(data, indent=2))
        return EXIT_OK

    if not checks:
        print("No checks match the selection.")
        return EXIT_OK

    print("Available checks:")
    for check in checks:
        print(f"  {check.check_id:45s} [{check.category.value:10s}] {check.name}")
    return EXIT_OK


def _add_selection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--checks",
        action="append",
        metavar="PATTERN",
        help="Check selector: '*', a category, a check ID or a glob (repeatable)",
    )
    parser.add_argument(
        "--category",
        type=str,
        help="Only run checks of this category",
    )
    parser.add_argument(
        "--current-version",
        type=str,
        help="Installed platform version",
    )
    parser.add_argument(
        "--target-version",
        type=str,
        help="Platform version being upgraded to",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cluster-lint",
        description="Diagnostic checks for ML cluster platform installations and upgrades",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"cluster-lint {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Run checks against a cluster snapshot")
    run_parser.add_argument(
        "--snapshot", "-s",
        type=str,
        required=True,
        help="YAML or JSON dump of cluster resources",
    )
    _add_selection_args(run_parser)
    run_parser.add_argument(
        "--output", "-o",
        choices=OUTPUT_FORMATS,
        help="Output format (default: table)",
    )
    run_parser.add_argument(
        "--min-severity",
        type=str,
        help="Only show results at or above this severity (critical, warning, info, all)",
    )
    run_parser.add_argument(
        "--fail-on-warning",
        action="store_true",
        help="Exit non-zero when any result is a warning",
    )
    run_parser.add_argument(
        "--no-fail-on-critical",
        action="store_true",
        help="Exit zero even when results are critical",
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        help="Run deadline in seconds (default: 300)",
    )
    run_parser.add_argument(
        "--workers",
        type=int,
        help="Number of concurrent check invocations (default: 1)",
    )
    run_parser.add_argument(
        "--describe",
        action="store_true",
        help="Add the check description column to table output",
    )

    # Plan command
    plan_parser = subparsers.add_parser("plan", help="Show which checks would run")
    _add_selection_args(plan_parser)
    plan_parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON plan",
    )

    # List command
    list_parser = subparsers.add_parser("list", help="List available checks")
    _add_selection_args(list_parser)
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON list",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    setup_logging(getattr(args, "verbose", False))

    if args.command == "run":
        return cmd_run(args)
    elif args.command == "plan":
        return cmd_plan(args)
    elif args.command == "list":
        return cmd_list(args)
    else:
        parser.print_help()
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
