"""Grouped-work closer: close convoys whose tracked issues are all resolved."""

from __future__ import annotations

from typing import Iterable

from instrukt_ai_logging import get_logger

from rigsweep.core.errors import CloseError, ListingError
from rigsweep.core.models import ConvoyCloseResult, OperationError, TrackedIssue
from rigsweep.core.protocols import ConvoyStore

logger = get_logger(__name__)

CONVOY_SCOPE = "convoys"
RESOLVED_ISSUE_STATUSES = frozenset({"closed", "tombstone"})


def is_convoy_complete(issues: Iterable[TrackedIssue]) -> bool:
    """A convoy is complete when it tracks at least one issue and all are resolved.

    A convoy tracking nothing is ambiguous and never counts as complete.
    """
    statuses = [issue.status for issue in issues]
    if not statuses:
        return False
    return all(status in RESOLVED_ISSUE_STATUSES for status in statuses)


async def close_completed_convoys(store: ConvoyStore, *, dry_run: bool, reason: str) -> ConvoyCloseResult:
    """Close (or list, in dry-run) every open convoy that is complete.

    A failure to list open convoys aborts this pass and is returned as
    ``listing_error``; a failure on one convoy never stops the others.
    """
    result = ConvoyCloseResult()
    try:
        convoys = await store.list_open()
    except ListingError as exc:
        logger.warning("Listing open convoys failed: %s", exc)
        result.listing_error = OperationError("listing", "list", CONVOY_SCOPE, None, str(exc))
        return result

    logger.debug("Checking %d open convoy(s) for completion", len(convoys))
    for convoy in convoys:
        try:
            tracked = await store.tracked_issues(convoy.id)
        except ListingError as exc:
            logger.warning("Could not read tracked issues of convoy %s: %s", convoy.id, exc)
            result.errors.append(OperationError("listing", "tracked_issues", CONVOY_SCOPE, convoy.id, str(exc)))
            continue

        if not is_convoy_complete(tracked):
            continue

        if dry_run:
            logger.info("Would close convoy %s (%s)", convoy.id, convoy.title)
            result.closed_records.append(convoy)
            continue

        try:
            await store.close(convoy.id, reason)
        except CloseError as exc:
            logger.warning("Failed to close convoy %s: %s", convoy.id, exc)
            result.errors.append(OperationError("mutation", "close", CONVOY_SCOPE, convoy.id, str(exc)))
            continue

        logger.info("Closed convoy %s (%s)", convoy.id, convoy.title)
        result.closed_records.append(convoy)

    return result
