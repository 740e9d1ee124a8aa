"""Cleanup reconciliation driver.

Runs the enabled passes in order (polecats, convoys, branches) and folds
their results into a single RunReport. Passes never depend on each other's
output. The run fails only when a done polecat could not be removed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from instrukt_ai_logging import get_logger

from rigsweep.constants import DEFAULT_CONVOY_CLOSE_REASON, DEFAULT_UNIT_CLOSE_REASON
from rigsweep.core.branches import collect_stale_branches
from rigsweep.core.convoys import close_completed_convoys
from rigsweep.core.models import Rig, RunConfig, RunReport
from rigsweep.core.protocols import BranchCollector, ConvoyStore, SessionRegistry, WorkUnitRegistry
from rigsweep.core.reaper import reap_done_units

logger = get_logger(__name__)


@dataclass(frozen=True)
class Collaborators:
    """External capabilities the engine sequences."""

    units: WorkUnitRegistry
    sessions: SessionRegistry
    convoys: ConvoyStore
    branches: BranchCollector
    unit_close_reason: str = DEFAULT_UNIT_CLOSE_REASON
    convoy_close_reason: str = DEFAULT_CONVOY_CLOSE_REASON


async def _run_units(config: RunConfig, rigs: Sequence[Rig], collab: Collaborators, report: RunReport) -> None:
    results = await reap_done_units(
        rigs,
        collab.units,
        collab.sessions,
        collab.convoys,
        dry_run=config.dry_run,
        close_reason=collab.unit_close_reason,
        max_parallel_rigs=config.max_parallel_rigs,
    )
    # Single aggregation point: per-rig results are only read after gather returns.
    for result in results:
        report.rigs.append(result)
        report.units_reclaimed += result.reclaimed
        report.units_failed += result.failed
        if result.listing_error is not None:
            report.errors.append(result.listing_error)
        report.errors.extend(result.errors)
        report.advisories.extend(result.advisories)

    if report.units_failed:
        logger.warning("polecat cleanup had errors: %d removal(s) failed", report.units_failed)


async def _run_convoys(config: RunConfig, collab: Collaborators, report: RunReport) -> None:
    result = await close_completed_convoys(collab.convoys, dry_run=config.dry_run, reason=collab.convoy_close_reason)
    if result.listing_error is not None:
        logger.warning("convoy cleanup had errors: %s", result.listing_error.message)
        report.errors.append(result.listing_error)
    report.errors.extend(result.errors)
    report.closed_convoys.extend(result.closed_records)
    report.convoys_closed += result.closed


async def _run_branches(config: RunConfig, rigs: Sequence[Rig], collab: Collaborators, report: RunReport) -> None:
    results = await collect_stale_branches(
        rigs,
        collab.branches,
        dry_run=config.dry_run,
        max_parallel_rigs=config.max_parallel_rigs,
    )
    for result in results:
        report.gc_rigs.append(result)
        if result.error is not None:
            report.errors.append(result.error)
        elif result.deleted:
            report.branches_collected += result.deleted


async def run_cleanup(config: RunConfig, rigs: Sequence[Rig], collaborators: Collaborators) -> RunReport:
    """Run one reconciliation pass over ``rigs``.

    Args:
        config: Pass selection and dry-run flag
        rigs: Resolved rigs, in the order results should be reported
        collaborators: Registries, store and collector to drive

    Returns:
        A fresh RunReport; ``report.exit_code`` is non-zero iff a removal failed
    """
    report = RunReport(dry_run=config.dry_run, passes=config.passes)
    logger.info(
        "Cleanup started",
        dry_run=config.dry_run,
        passes=",".join(config.passes),
        rigs=len(rigs),
    )

    if config.run_units:
        await _run_units(config, rigs, collaborators, report)
    if config.run_convoys:
        await _run_convoys(config, collaborators, report)
    if config.run_branches:
        await _run_branches(config, rigs, collaborators, report)

    logger.info(
        "Cleanup complete",
        dry_run=config.dry_run,
        units_reclaimed=report.units_reclaimed,
        units_failed=report.units_failed,
        convoys_closed=report.convoys_closed,
        branches_collected=report.branches_collected,
        errors=len(report.errors),
    )
    return report
