"""Protocol definitions for the collaborators the cleanup engine drives.

The engine only sequences these calls and interprets their results. Each
method documents the typed error it raises on failure; anything else is a bug
in the collaborator and propagates.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rigsweep.core.models import ConvoyRecord, Rig, TrackedIssue, WorkUnit


@runtime_checkable
class RigDirectory(Protocol):
    """Enumerates the rigs of a town."""

    def discover(self) -> list[Rig]:
        """Return known rigs in a stable order.

        Raises:
            ConfigError: If the rig registry cannot be read
        """
        ...


@runtime_checkable
class WorkUnitRegistry(Protocol):
    """Polecat worktrees of one rig."""

    async def list_units(self, rig: Rig) -> list[WorkUnit]:
        """Raises ListingError if the rig's units cannot be enumerated."""
        ...

    async def remove_forced(self, rig: Rig, name: str) -> None:
        """Remove worktree and registry entry regardless of unit state.

        Raises:
            RemovalError: If removal fails
        """
        ...


@runtime_checkable
class SessionRegistry(Protocol):
    """Interactive sessions keyed by polecat name."""

    async def is_running(self, rig: Rig, name: str) -> bool:
        """Raises SessionQueryError if the state cannot be determined."""
        ...

    async def stop(self, rig: Rig, name: str, force: bool) -> None:
        """Raises StopError if the session cannot be stopped."""
        ...


@runtime_checkable
class ConvoyStore(Protocol):
    """Town-wide grouped-work records and per-unit tracking issues."""

    async def list_open(self) -> list[ConvoyRecord]:
        """Raises ListingError if open convoys cannot be listed."""
        ...

    async def tracked_issues(self, convoy_id: str) -> list[TrackedIssue]:
        """Raises ListingError if the tracked issues cannot be read."""
        ...

    async def close(self, convoy_id: str, reason: str) -> None:
        """Raises CloseError if the record cannot be closed."""
        ...

    async def close_unit_issue(self, rig: Rig, name: str, reason: str) -> None:
        """Close the tracking issue of a reclaimed polecat.

        Raises:
            AdvisoryError: On any failure; callers never treat this as fatal
        """
        ...


@runtime_checkable
class BranchCollector(Protocol):
    """Deletes branches no longer referenced by any live polecat."""

    async def collect_stale(self, rig: Rig) -> int:
        """Return the number of branches deleted. Raises GCError on failure."""
        ...
