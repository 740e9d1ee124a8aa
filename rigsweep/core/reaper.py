"""Work-unit reaper: reclaim polecats in the done state.

A done polecat is reclaimable whether or not its session still runs; a running
session only makes it a zombie that must be stopped first. Reclamation per
unit is:

1. Force-stop the session if it is running (failure is logged, never blocks).
2. Force-remove the worktree and registry entry ("nuclear" removal).
3. Close the polecat's tracking issue (advisory, failures only captured).

A removal failure is counted and the reaper moves on to the next unit and rig.
"""

from __future__ import annotations

from typing import Sequence

from instrukt_ai_logging import get_logger

from rigsweep.core.errors import ListingError, RemovalError, RigsweepError, SessionQueryError, StopError
from rigsweep.core.fanout import gather_per_rig
from rigsweep.core.models import OperationError, Rig, RigReapResult, UnitOutcome, WorkUnit
from rigsweep.core.protocols import ConvoyStore, SessionRegistry, WorkUnitRegistry

logger = get_logger(__name__)


async def _probe_session(sessions: SessionRegistry, rig: Rig, name: str, result: RigReapResult) -> bool | None:
    """Return the session's running state, or None when it cannot be queried."""
    try:
        return await sessions.is_running(rig, name)
    except SessionQueryError as exc:
        logger.warning("Could not query session for %s/%s: %s", rig.name, name, exc)
        result.errors.append(OperationError("listing", "query", rig.name, name, str(exc)))
        return None


async def _reclaim_unit(
    rig: Rig,
    unit: WorkUnit,
    registry: WorkUnitRegistry,
    sessions: SessionRegistry,
    store: ConvoyStore,
    result: RigReapResult,
    *,
    dry_run: bool,
    close_reason: str,
) -> UnitOutcome:
    running = await _probe_session(sessions, rig, unit.name, result)

    if dry_run:
        logger.info("Would nuke %s/%s", rig.name, unit.name, session_running=running)
        result.reclaimed += 1
        return UnitOutcome(unit.name, "would_reclaim", session_running=running)

    stop_error: str | None = None
    if running:
        try:
            await sessions.stop(rig, unit.name, force=True)
            logger.info("Stopped zombie session for %s/%s", rig.name, unit.name)
        except StopError as exc:
            # Removal still proceeds.
            stop_error = str(exc)
            logger.warning("Failed to stop session for %s/%s: %s", rig.name, unit.name, exc)
            result.errors.append(OperationError("mutation", "stop", rig.name, unit.name, stop_error))

    try:
        await registry.remove_forced(rig, unit.name)
    except RemovalError as exc:
        logger.error("Failed to nuke %s/%s: %s", rig.name, unit.name, exc)
        result.failed += 1
        result.errors.append(OperationError("mutation", "remove", rig.name, unit.name, str(exc)))
        return UnitOutcome(unit.name, "failed", session_running=running, stop_error=stop_error, error=str(exc))

    try:
        await store.close_unit_issue(rig, unit.name, close_reason)
    except (RigsweepError, OSError) as exc:
        logger.debug("Could not close tracking issue for %s/%s: %s", rig.name, unit.name, exc)
        result.advisories.append(OperationError("advisory", "close_issue", rig.name, unit.name, str(exc)))

    logger.info("Nuked %s/%s", rig.name, unit.name)
    result.reclaimed += 1
    return UnitOutcome(unit.name, "reclaimed", session_running=running, stop_error=stop_error)


async def reap_rig(
    rig: Rig,
    registry: WorkUnitRegistry,
    sessions: SessionRegistry,
    store: ConvoyStore,
    *,
    dry_run: bool,
    close_reason: str,
) -> RigReapResult:
    """Reclaim (or preview reclaiming) every done polecat of one rig.

    Units are handled strictly in listing order; non-done units are never
    touched, not even to query their session.
    """
    result = RigReapResult(rig=rig)
    try:
        units = await registry.list_units(rig)
    except ListingError as exc:
        logger.warning("Error listing polecats in %s: %s", rig.name, exc)
        result.listing_error = OperationError("listing", "list", rig.name, None, str(exc))
        return result

    done_units = [unit for unit in units if unit.is_done]
    if not done_units:
        logger.debug("No done polecats in %s (%d total)", rig.name, len(units))
        return result

    logger.info("%s: %d done polecat(s)", rig.name, len(done_units))
    for unit in done_units:
        outcome = await _reclaim_unit(
            rig,
            unit,
            registry,
            sessions,
            store,
            result,
            dry_run=dry_run,
            close_reason=close_reason,
        )
        result.units.append(outcome)
    return result


async def reap_done_units(
    rigs: Sequence[Rig],
    registry: WorkUnitRegistry,
    sessions: SessionRegistry,
    store: ConvoyStore,
    *,
    dry_run: bool,
    close_reason: str,
    max_parallel_rigs: int = 1,
) -> list[RigReapResult]:
    """Run the reaper over all rigs; results keep rig order."""

    async def _reap(rig: Rig) -> RigReapResult:
        return await reap_rig(rig, registry, sessions, store, dry_run=dry_run, close_reason=close_reason)

    return await gather_per_rig(rigs, _reap, max_parallel_rigs)
