"""Data models for a cleanup reconciliation pass."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Literal

ErrorKind = Literal["listing", "mutation", "advisory"]
UnitAction = Literal["would_reclaim", "reclaimed", "failed"]
PassName = Literal["polecats", "convoys", "branches"]


@dataclass(frozen=True)
class Rig:
    """One managed project checkout."""

    name: str
    path: Path


class WorkUnitState(str, Enum):
    """Lifecycle state of a polecat. Only DONE is acted upon."""

    WORKING = "working"
    DONE = "done"
    STUCK = "stuck"
    IDLE = "idle"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "WorkUnitState":
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return cls.UNKNOWN


@dataclass(frozen=True)
class WorkUnit:
    """A polecat bound to a rig. Its session and branch share its name."""

    name: str
    state: WorkUnitState

    @property
    def is_done(self) -> bool:
        return self.state is WorkUnitState.DONE


@dataclass(frozen=True)
class ConvoyRecord:
    """Open grouped-work record; title is display only."""

    id: str
    title: str


@dataclass(frozen=True)
class TrackedIssue:
    id: str
    status: str


@dataclass(frozen=True)
class OperationError:
    """A failure captured during a pass, with enough identity to act on manually."""

    kind: ErrorKind
    operation: str
    scope: str
    target: str | None
    message: str

    def describe(self) -> str:
        where = f"{self.scope}/{self.target}" if self.target else self.scope
        return f"{where}: {self.operation} failed: {self.message}"


@dataclass(frozen=True)
class UnitOutcome:
    """What happened (or would happen) to one done polecat."""

    name: str
    action: UnitAction
    session_running: bool | None = None
    stop_error: str | None = None
    error: str | None = None


@dataclass
class RigReapResult:
    """Per-rig outcome of the work-unit reaper."""

    rig: Rig
    units: list[UnitOutcome] = field(default_factory=list)
    reclaimed: int = 0
    failed: int = 0
    errors: list[OperationError] = field(default_factory=list)
    advisories: list[OperationError] = field(default_factory=list)
    listing_error: OperationError | None = None

    @property
    def skipped(self) -> bool:
        return self.listing_error is not None

    @property
    def zombies(self) -> list[str]:
        return [unit.name for unit in self.units if unit.session_running]


@dataclass
class ConvoyCloseResult:
    """Outcome of the grouped-work closer.

    In dry-run mode ``closed_records`` holds the records that would be closed.
    """

    closed_records: list[ConvoyRecord] = field(default_factory=list)
    errors: list[OperationError] = field(default_factory=list)
    listing_error: OperationError | None = None

    @property
    def closed(self) -> int:
        return len(self.closed_records)


@dataclass(frozen=True)
class BranchCollectResult:
    """Per-rig outcome of stale branch collection.

    A dry-run only announces intent: ``previewed`` is set and ``deleted`` stays None.
    """

    rig: Rig
    deleted: int | None = None
    previewed: bool = False
    error: OperationError | None = None


@dataclass(frozen=True)
class RunConfig:
    """Which passes to run and whether to mutate anything."""

    dry_run: bool = False
    run_units: bool = True
    run_convoys: bool = True
    run_branches: bool = False
    max_parallel_rigs: int = 1

    def __post_init__(self) -> None:
        if self.max_parallel_rigs < 1:
            raise ValueError("max_parallel_rigs must be >= 1")

    @classmethod
    def from_flags(
        cls,
        *,
        dry_run: bool = False,
        gc: bool = False,
        only_polecats: bool = False,
        only_convoys: bool = False,
        max_parallel_rigs: int = 1,
    ) -> "RunConfig":
        """Build a config from CLI-style flags.

        Without either "only" flag both passes run. Branch GC needs the polecat
        pass to be enabled as well as being requested.
        """
        both = not only_polecats and not only_convoys
        run_units = both or only_polecats
        return cls(
            dry_run=dry_run,
            run_units=run_units,
            run_convoys=both or only_convoys,
            run_branches=gc and run_units,
            max_parallel_rigs=max_parallel_rigs,
        )

    @property
    def passes(self) -> list[PassName]:
        enabled: list[PassName] = []
        if self.run_units:
            enabled.append("polecats")
        if self.run_convoys:
            enabled.append("convoys")
        if self.run_branches:
            enabled.append("branches")
        return enabled


@dataclass
class RunReport:
    """Accumulated result of one reconciliation pass. Never persisted."""

    dry_run: bool = False
    passes: list[PassName] = field(default_factory=list)
    units_reclaimed: int = 0
    units_failed: int = 0
    convoys_closed: int = 0
    branches_collected: int = 0
    errors: list[OperationError] = field(default_factory=list)
    advisories: list[OperationError] = field(default_factory=list)
    rigs: list[RigReapResult] = field(default_factory=list)
    closed_convoys: list[ConvoyRecord] = field(default_factory=list)
    gc_rigs: list[BranchCollectResult] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        # Convoy and branch failures are housekeeping warnings only.
        return self.units_failed == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    def to_dict(self) -> dict[str, object]:
        return {
            "dry_run": self.dry_run,
            "passes": list(self.passes),
            "succeeded": self.succeeded,
            "units_reclaimed": self.units_reclaimed,
            "units_failed": self.units_failed,
            "convoys_closed": self.convoys_closed,
            "branches_collected": self.branches_collected,
            "rigs": [
                {
                    "name": result.rig.name,
                    "path": str(result.rig.path),
                    "skipped": result.skipped,
                    "reclaimed": result.reclaimed,
                    "failed": result.failed,
                    "units": [asdict(unit) for unit in result.units],
                }
                for result in self.rigs
            ],
            "closed_convoys": [asdict(record) for record in self.closed_convoys],
            "branches": [
                {
                    "rig": result.rig.name,
                    "deleted": result.deleted,
                    "previewed": result.previewed,
                    "failed": result.error is not None,
                }
                for result in self.gc_rigs
            ],
            "errors": [asdict(error) for error in self.errors],
            "advisories": [asdict(error) for error in self.advisories],
        }
