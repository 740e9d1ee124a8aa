"""Stale branch collection across rigs.

The collector has no non-destructive preview, so a dry-run only announces
which rigs would be collected; it never reports a count.
"""

from __future__ import annotations

from typing import Sequence

from instrukt_ai_logging import get_logger

from rigsweep.core.errors import GCError
from rigsweep.core.fanout import gather_per_rig
from rigsweep.core.models import BranchCollectResult, OperationError, Rig
from rigsweep.core.protocols import BranchCollector

logger = get_logger(__name__)


async def collect_rig_branches(rig: Rig, collector: BranchCollector, *, dry_run: bool) -> BranchCollectResult:
    if dry_run:
        logger.info("Would gc branches in %s", rig.name)
        return BranchCollectResult(rig=rig, previewed=True)

    try:
        deleted = await collector.collect_stale(rig)
    except GCError as exc:
        logger.warning("gc failed in %s: %s", rig.name, exc)
        return BranchCollectResult(rig=rig, error=OperationError("mutation", "collect", rig.name, None, str(exc)))

    if deleted:
        logger.info("GC'd %d branch(es) in %s", deleted, rig.name)
    return BranchCollectResult(rig=rig, deleted=deleted)


async def collect_stale_branches(
    rigs: Sequence[Rig],
    collector: BranchCollector,
    *,
    dry_run: bool,
    max_parallel_rigs: int = 1,
) -> list[BranchCollectResult]:
    async def _collect(rig: Rig) -> BranchCollectResult:
        return await collect_rig_branches(rig, collector, dry_run=dry_run)

    return await gather_per_rig(rigs, _collect, max_parallel_rigs)
