"""Git worktree-backed polecat registry and branch collector.

Layout inside a rig (the rig path is the main git checkout)::

    <rig>/polecats/<name>/                     worktree of branch polecat/<name>
    <rig>/polecats/<name>/.polecat/state.yaml  ``state: done`` etc.

The polecat directory is the registry entry: removing it (and pruning the
worktree metadata) removes the polecat.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

import yaml
from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError
from instrukt_ai_logging import get_logger

from rigsweep.constants import POLECAT_BRANCH_PREFIX, POLECAT_STATE_FILE, POLECATS_DIR
from rigsweep.core.errors import GCError, ListingError, RemovalError
from rigsweep.core.models import Rig, WorkUnit, WorkUnitState

logger = get_logger(__name__)


def read_polecat_state(unit_dir: Path) -> WorkUnitState:
    """Read a polecat's lifecycle state; unreadable state is UNKNOWN, never DONE."""
    state_path = unit_dir / POLECAT_STATE_FILE
    if not state_path.exists():
        return WorkUnitState.UNKNOWN
    try:
        data = yaml.safe_load(state_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Unreadable polecat state %s: %s", state_path, exc)
        return WorkUnitState.UNKNOWN
    if not isinstance(data, dict):
        return WorkUnitState.UNKNOWN
    return WorkUnitState.parse(data.get("state"))


def _checked_out_branches(repo: Repo) -> set[str]:
    """Branches currently checked out in any worktree (including the main one)."""
    branches: set[str] = set()
    for line in repo.git.worktree("list", "--porcelain").splitlines():
        if line.startswith("branch refs/heads/"):
            branches.add(line[len("branch refs/heads/") :])
    return branches


def _open_repo(path: Path) -> Repo:
    return Repo(path)


class GitPolecatRegistry:
    """Work-unit registry and branch collector for one town's rigs."""

    def __init__(self, *, directory: str = POLECATS_DIR, branch_prefix: str = POLECAT_BRANCH_PREFIX) -> None:
        self._directory = directory
        self._branch_prefix = branch_prefix

    def polecats_dir(self, rig: Rig) -> Path:
        return rig.path / self._directory

    def branch_name(self, name: str) -> str:
        return f"{self._branch_prefix}{name}"

    # -- listing ---------------------------------------------------------

    def _list_units_sync(self, rig: Rig) -> list[WorkUnit]:
        root = self.polecats_dir(rig)
        if not root.exists():
            return []
        try:
            entries = sorted(child for child in root.iterdir() if child.is_dir() and not child.name.startswith("."))
        except OSError as exc:
            raise ListingError(f"reading {root}: {exc}") from exc
        return [WorkUnit(name=entry.name, state=read_polecat_state(entry)) for entry in entries]

    async def list_units(self, rig: Rig) -> list[WorkUnit]:
        return await asyncio.to_thread(self._list_units_sync, rig)

    # -- removal ---------------------------------------------------------

    def _remove_forced_sync(self, rig: Rig, name: str) -> None:
        if not name or "/" in name or name in (".", ".."):
            raise RemovalError(f"refusing to remove invalid polecat name {name!r}")

        unit_dir = self.polecats_dir(rig) / name
        try:
            repo = _open_repo(rig.path)
        except (InvalidGitRepositoryError, NoSuchPathError) as exc:
            raise RemovalError(f"{rig.path} is not a git repository") from exc

        if unit_dir.exists():
            try:
                # Double --force also removes locked and dirty worktrees.
                repo.git.worktree("remove", "--force", "--force", str(unit_dir))
            except GitCommandError as exc:
                logger.warning("git worktree remove failed for %s, deleting directory: %s", unit_dir, exc.stderr)
            if unit_dir.exists():
                try:
                    shutil.rmtree(unit_dir)
                except OSError as exc:
                    raise RemovalError(f"deleting {unit_dir}: {exc}") from exc

        try:
            repo.git.worktree("prune")
        except GitCommandError as exc:
            raise RemovalError(f"git worktree prune in {rig.path}: {exc.stderr}") from exc
        logger.debug("Removed polecat worktree %s", unit_dir)

    async def remove_forced(self, rig: Rig, name: str) -> None:
        await asyncio.to_thread(self._remove_forced_sync, rig, name)

    # -- branch gc -------------------------------------------------------

    def _collect_stale_sync(self, rig: Rig) -> int:
        try:
            repo = _open_repo(rig.path)
            repo.git.worktree("prune")
            checked_out = _checked_out_branches(repo)
            live = {unit.name for unit in self._list_units_sync(rig)}
            heads = list(repo.heads)
        except (InvalidGitRepositoryError, NoSuchPathError, GitCommandError, ListingError) as exc:
            raise GCError(f"inspecting branches in {rig.path}: {exc}") from exc

        deleted = 0
        for head in heads:
            if not head.name.startswith(self._branch_prefix):
                continue
            unit_name = head.name[len(self._branch_prefix) :]
            if unit_name in live or head.name in checked_out:
                continue
            try:
                repo.delete_head(head, force=True)
            except GitCommandError as exc:
                logger.warning("Could not delete branch %s in %s: %s", head.name, rig.name, exc.stderr)
                continue
            logger.debug("Deleted stale branch %s in %s", head.name, rig.name)
            deleted += 1
        return deleted

    async def collect_stale(self, rig: Rig) -> int:
        return await asyncio.to_thread(self._collect_stale_sync, rig)
