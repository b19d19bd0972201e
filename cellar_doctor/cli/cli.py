# Copyright 2026 Cisco Systems, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Command-line interface for Cellar Doctor."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config.config import DoctorConfig
from ..core.check_factory import all_checks, build_checks
from ..core.context import RunContext
from ..core.doctor_policy import DoctorPolicy
from ..core.exceptions import PackageUnavailableError, PolicyError
from ..core.models import DiagnosticReport
from ..core.reporters.json_reporter import JSONReporter
from ..core.reporters.markdown_reporter import MarkdownReporter
from ..core.runner import CheckRunner

logger = logging.getLogger("cellar_doctor.cli")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _load_config(args: argparse.Namespace) -> DoctorConfig:
    """Load configuration from ``--env-file`` or the process environment."""
    env_file = getattr(args, "env_file", None)
    if env_file:
        logger.info("Using environment file: %s", env_file)
        return DoctorConfig.from_file(Path(env_file))
    return DoctorConfig.from_env()


def _load_policy(args: argparse.Namespace) -> DoctorPolicy:
    """Load doctor policy from ``--policy`` flag or return the default."""
    policy_value = getattr(args, "policy", None)
    if not policy_value:
        return DoctorPolicy.default()

    try:
        policy = DoctorPolicy.from_yaml(policy_value)
    except FileNotFoundError:
        print(f"Error: Policy file not found: {policy_value}", file=sys.stderr)
        sys.exit(1)
    except PolicyError as e:
        print(f"Error loading policy file: {e}", file=sys.stderr)
        sys.exit(1)
    logger.info("Using doctor policy: %s (%s)", policy_value, policy.policy_name)
    return policy


def _format_output(args: argparse.Namespace, report: DiagnosticReport) -> str | None:
    """Formatted report text, or ``None`` for the console summary."""
    fmt = getattr(args, "format", "summary")
    if fmt == "json":
        return JSONReporter(pretty=not args.compact).generate_report(report)
    if fmt == "markdown":
        return MarkdownReporter(detailed=args.verbose).generate_report(report)
    return None


def _write_output(args: argparse.Namespace, output: str) -> None:
    """Write *output* to a file or stdout."""
    if args.output:
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(output)
        print(f"Report saved to: {args.output}")
    else:
        print(output)


def _print_summary(report: DiagnosticReport, console: Console) -> None:
    if report.is_clean:
        console.print("Your system is ready to brew.")
        return

    console.print(
        "Please note that these warnings are just used to help diagnose problems.\n"
        "If everything you use the package manager for is working fine: please\n"
        "don't worry or file an issue; just ignore this. Thanks!\n"
    )
    for result in report.results:
        label = "[red]Error:[/red]" if result.failed else "[yellow]Warning:[/yellow]"
        console.print(f"{label} {escape(result.message or '')}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def run_command(args: argparse.Namespace) -> int:
    """Handle the ``run`` command."""
    policy = _load_policy(args)

    if args.list_checks:
        for check in build_checks(policy):
            print(f"{check.name:45s} {check.description}")
        return 0

    try:
        checks = build_checks(policy, args.checks or None)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    context = RunContext(config=_load_config(args), policy=policy)
    report = CheckRunner(checks).run(context)
    logger.info("Ran %d checks in %.2fs", len(report.checks_run), report.duration_seconds)

    output = _format_output(args, report)
    if output is None:
        _print_summary(report, Console())
    else:
        _write_output(args, output)

    return 0 if report.is_clean else 1


def missing_command(args: argparse.Namespace) -> int:
    """Handle the ``missing`` command."""
    context = RunContext(config=_load_config(args))
    provider = context.provider

    if args.names:
        packages = []
        for name in args.names:
            try:
                packages.append(provider.resolve(name))
            except PackageUnavailableError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
    else:
        packages = provider.installed_packages()

    missing = context.dependency_analyzer().missing_dependencies(packages)
    for name, deps in missing.items():
        print(f"{name}: {' '.join(sorted(deps))}")
    return 1 if missing else 0


def list_checks_command(_args: argparse.Namespace) -> int:
    """Handle the ``list-checks`` command."""
    category = None
    for check in all_checks():
        if check.category != category:
            category = check.category
            print(f"\n{category}:")
        print(f"  {check.name:45s} {check.description}")
    print()
    return 0


def generate_policy_command(args: argparse.Namespace) -> int:
    """Handle the ``generate-policy`` command."""
    output_path = Path(args.output)
    try:
        DoctorPolicy.default().to_yaml(output_path)
    except OSError as e:
        print(f"Error generating policy: {e}", file=sys.stderr)
        return 1

    print(f"Generated default doctor policy: {output_path}\n")
    print("Edit the file to customise, then use:")
    print(f"  cellar-doctor run --policy {output_path}\n")
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Cellar Doctor - Diagnose problems with a package manager installation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cellar-doctor run
  cellar-doctor run check_missing_deps check_git_origin
  cellar-doctor run --format markdown -o doctor.md
  cellar-doctor run --policy my_policy.yaml --verbose
  cellar-doctor missing openssl
  cellar-doctor generate-policy -o my_policy.yaml
        """,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    common.add_argument("--env-file", metavar="PATH", help=".env file overlaying the process environment")
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # -- run ----------------------------------------------------------------
    run_p = subparsers.add_parser("run", help="Run the diagnostic checks", parents=[common])
    run_p.add_argument("checks", nargs="*", metavar="CHECK", help="Run only these checks (default: all)")
    run_p.add_argument("--policy", metavar="PATH", help="Path to a doctor policy YAML")
    run_p.add_argument(
        "--format",
        choices=["summary", "markdown", "json"],
        default="summary",
        help="Output format (default: summary)",
    )
    run_p.add_argument("--output", "-o", help="Output file path (markdown and json only)")
    run_p.add_argument("--compact", action="store_true", help="Compact JSON output")
    run_p.add_argument("--list-checks", action="store_true", help="List the checks that would run and exit")

    # -- missing ------------------------------------------------------------
    missing_p = subparsers.add_parser("missing", help="Show packages with missing dependencies", parents=[common])
    missing_p.add_argument("names", nargs="*", metavar="NAME", help="Only these packages (default: all installed)")

    # -- list-checks --------------------------------------------------------
    subparsers.add_parser("list-checks", help="List every built-in check by category", parents=[common])

    # -- generate-policy ----------------------------------------------------
    gp_p = subparsers.add_parser("generate-policy", help="Generate the default doctor policy YAML", parents=[common])
    gp_p.add_argument("--output", "-o", default="doctor_policy.yaml", help="Output file path")

    # -- dispatch -----------------------------------------------------------
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    dispatch = {
        "run": run_command,
        "missing": missing_command,
        "list-checks": list_checks_command,
        "generate-policy": generate_policy_command,
    }
    handler = dispatch.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
