"""Error taxonomy for cleanup reconciliation.

Listing and mutation errors are scoped to one rig, unit, convoy or store and
never abort sibling work. ConfigError is the only class that stops a run, and
it is raised before any pass starts.
"""

from __future__ import annotations


class RigsweepError(RuntimeError):
    """Base class for every error raised by rigsweep and its adapters."""


class ConfigError(RigsweepError):
    """Raised when the town root, rig registry or config file cannot be read."""


class ListingError(RigsweepError):
    """Raised when a resource set (units of a rig, open convoys) cannot be enumerated."""


class SessionQueryError(RigsweepError):
    """Raised when the running state of a session cannot be determined."""


class MutationError(RigsweepError):
    """Raised when a single stop/remove/close/collect call fails."""


class StopError(MutationError):
    """Raised when a session cannot be stopped."""


class RemovalError(MutationError):
    """Raised when a work unit's worktree or registry entry cannot be removed."""


class CloseError(MutationError):
    """Raised when a convoy record cannot be closed."""


class GCError(MutationError):
    """Raised when stale branch collection fails for a rig."""


class AdvisoryError(RigsweepError):
    """Raised by best-effort side effects whose failure never affects run success."""
