"""rigsweep CLI.

Examples:
  rigsweep cleanup              # nuke all done polecats, close completed convoys
  rigsweep cleanup --dry-run    # preview what would be cleaned up
  rigsweep cleanup --gc         # also gc stale branches after cleanup
  rigsweep cleanup --polecats   # only clean polecats (skip convoys)
  rigsweep cleanup --convoys    # only close convoys (skip polecats)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from instrukt_ai_logging import get_logger

from rigsweep.adapters import BeadsConvoyStore, GitPolecatRegistry, TmuxSessionRegistry
from rigsweep.cli.render import render_header, render_report
from rigsweep.config import RigsweepConfig, load_rigsweep_config
from rigsweep.core import Collaborators, RunConfig, run_cleanup
from rigsweep.core.errors import ConfigError
from rigsweep.logging_config import setup_logging
from rigsweep.town import TownRigDirectory, find_town_root

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_UNITS_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_collaborators(town_root: Path, settings: RigsweepConfig) -> Collaborators:
    """Wire the git, tmux and beads adapters from configuration."""
    timeout = settings.cleanup.command_timeout_seconds
    polecats = GitPolecatRegistry(
        directory=settings.polecats.directory,
        branch_prefix=settings.polecats.branch_prefix,
    )
    return Collaborators(
        units=polecats,
        sessions=TmuxSessionRegistry(
            prefix=settings.sessions.prefix,
            tmux_binary=settings.sessions.tmux_binary,
            stop_grace_seconds=settings.sessions.stop_grace_seconds,
            timeout=timeout,
        ),
        convoys=BeadsConvoyStore(
            town_root / settings.beads.directory,
            binary=settings.beads.binary,
            issue_prefix=settings.beads.issue_prefix,
            timeout=timeout,
        ),
        branches=polecats,
        unit_close_reason=settings.cleanup.unit_close_reason,
        convoy_close_reason=settings.cleanup.convoy_close_reason,
    )


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rigsweep", description="Town housekeeping for polecats and convoys.")
    parser.add_argument("--log-level", default=None, help="Override RIGSWEEP_LOG_LEVEL (e.g. DEBUG).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    cleanup = subparsers.add_parser(
        "cleanup",
        help="Clean up done polecats and completed convoys",
        description=(
            "Finds and nukes done polecats across all rigs (stopping zombie sessions first) "
            "and auto-closes convoys whose tracked issues are all closed."
        ),
    )
    cleanup.add_argument("--dry-run", action="store_true", help="Preview what would be cleaned up")
    cleanup.add_argument("--gc", action="store_true", help="Also gc stale branches after cleanup")
    cleanup.add_argument("--polecats", action="store_true", help="Only clean polecats (skip convoys)")
    cleanup.add_argument("--convoys", action="store_true", help="Only close convoys (skip polecats)")
    cleanup.add_argument("--town", type=Path, default=None, help="Town root (default: search upward from cwd)")
    cleanup.add_argument("--config", type=Path, default=None, help="Config file (default: <town>/mayor/rigsweep.yml)")
    cleanup.add_argument("--parallel", type=_positive_int, default=None, help="Rigs to process concurrently")
    cleanup.add_argument("--json", action="store_true", help="Print the run report as JSON")
    return parser


def _cmd_cleanup(args: argparse.Namespace) -> int:
    try:
        town_root = find_town_root(args.town)
        settings = load_rigsweep_config(town_root, args.config)
        rigs = TownRigDirectory(town_root).discover()
    except ConfigError as exc:
        logger.error("Cleanup aborted: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    run_config = RunConfig.from_flags(
        dry_run=args.dry_run,
        gc=args.gc,
        only_polecats=args.polecats,
        only_convoys=args.convoys,
        max_parallel_rigs=args.parallel or settings.cleanup.max_parallel_rigs,
    )
    collaborators = build_collaborators(town_root, settings)

    if not args.json:
        print(render_header(run_config))
        print()

    report = asyncio.run(run_cleanup(run_config, rigs, collaborators))

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(render_report(report))
    return EXIT_OK if report.succeeded else EXIT_UNITS_FAILED


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "cleanup":
        return _cmd_cleanup(args)
    parser.error(f"unknown command {args.command}")
    return EXIT_CONFIG_ERROR
