"""Command-line entry point.

Usage::

    # Provision resources for CF_PAGES_BRANCH and update preview bindings
    cf-branch-wrangler

    # Remove every branch resource (asks per resource)
    cf-branch-wrangler cleanup

    # Remove one branch's resources without prompting
    cf-branch-wrangler cleanup --branch feature/login --yes
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Mapping, Sequence

from .cleanup import ConfirmFn
from .errors import BranchWranglerError
from .observability import configure_logging, get_logger
from .orchestrator import ProvisionStatus, run_cleanup, run_provision
from .settings import Settings

logger = get_logger("branch_wrangler.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def prompt_confirm(question: str) -> bool:
    """Ask a yes/no question on the terminal; anything but ``y`` is no."""
    try:
        answer = input(f"{question} (y/N) ")
    except EOFError:
        return False
    return answer.strip().lower() == "y"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cf-branch-wrangler",
        description="Provision per-branch D1/R2/KV resources for Cloudflare Pages previews",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Directory containing the wrangler config (default: current directory)",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("provision", help="Provision branch resources (default)")

    cleanup = subparsers.add_parser("cleanup", help="Delete branch-specific resources")
    cleanup.add_argument(
        "-y", "--yes", action="store_true", help="Delete without asking for confirmation",
    )
    cleanup.add_argument(
        "--branch", default=None, help="Only delete resources for this branch",
    )
    return parser


def _provision(settings: Settings) -> int:
    logger.info("provisioning_started", tool="cf-branch-wrangler")
    outcome = run_provision(settings)
    if outcome.status is ProvisionStatus.PROVISIONED:
        logger.info("provisioning_complete", project=outcome.project_name, suffix=outcome.suffix)
    else:
        logger.info("provisioning_complete", no_action=True, reason=outcome.status.value)
    return EXIT_OK


def _cleanup(settings: Settings, args: argparse.Namespace, confirm: ConfirmFn) -> int:
    logger.info("cleanup_started", tool="cf-branch-wrangler", branch=args.branch)
    summary = run_cleanup(
        settings,
        auto_confirm=args.yes,
        branch_filter=args.branch,
        confirm=confirm,
    )
    print(
        f"cf-branch-wrangler cleanup: Done ({summary.deleted} deleted, "
        f"{summary.skipped} skipped, {summary.failed} failed)"
    )
    return EXIT_OK


def main(
    argv: Sequence[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    confirm: ConfirmFn = prompt_confirm,
) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env(env if env is not None else os.environ, project_root=args.project_root)
    configure_logging(level=settings.log_level, json_output=settings.log_format == "json")

    try:
        if args.command == "cleanup":
            return _cleanup(settings, args, confirm)
        return _provision(settings)
    except BranchWranglerError as exc:
        logger.error("cf-branch-wrangler failed", error=str(exc), error_type=type(exc).__name__)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("cf-branch-wrangler interrupted")
        return EXIT_INTERRUPTED


def run() -> None:
    """Console-script entry point."""
    raise SystemExit(main())
