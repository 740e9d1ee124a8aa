"""Integration tests for the git worktree polecat registry."""

from pathlib import Path

import pytest
from git import Repo

from rigsweep.adapters.polecats import GitPolecatRegistry
from rigsweep.core.engine import Collaborators, run_cleanup
from rigsweep.core.errors import RemovalError
from rigsweep.core.models import Rig, RunConfig, WorkUnitState
from tests.fakes import FakeTown
from tests.integration.conftest import add_polecat

pytestmark = pytest.mark.integration


def _worktree_paths(repo: Repo) -> list[str]:
    return [
        line[len("worktree ") :]
        for line in repo.git.worktree("list", "--porcelain").splitlines()
        if line.startswith("worktree ")
    ]


@pytest.mark.asyncio
async def test_list_units_reads_states(rig_repo: tuple[Rig, Repo]):
    rig, repo = rig_repo
    add_polecat(rig, repo, "toast", "done")
    add_polecat(rig, repo, "nux", "working")
    add_polecat(rig, repo, "slit", None)

    units = await GitPolecatRegistry().list_units(rig)

    assert [(u.name, u.state) for u in units] == [
        ("nux", WorkUnitState.WORKING),
        ("slit", WorkUnitState.UNKNOWN),
        ("toast", WorkUnitState.DONE),
    ]


@pytest.mark.asyncio
async def test_list_units_without_polecats_dir(rig_repo: tuple[Rig, Repo]):
    rig, _ = rig_repo
    assert await GitPolecatRegistry().list_units(rig) == []


@pytest.mark.asyncio
async def test_remove_forced_removes_dirty_locked_worktree(rig_repo: tuple[Rig, Repo]):
    rig, repo = rig_repo
    unit_dir = add_polecat(rig, repo, "toast", "done")
    (unit_dir / "scratch.txt").write_text("uncommitted", encoding="utf-8")
    repo.git.worktree("lock", str(unit_dir))

    await GitPolecatRegistry().remove_forced(rig, "toast")

    assert not unit_dir.exists()
    assert not any(path.endswith("/toast") for path in _worktree_paths(repo))


@pytest.mark.asyncio
async def test_remove_forced_rejects_path_names(rig_repo: tuple[Rig, Repo]):
    rig, _ = rig_repo
    with pytest.raises(RemovalError):
        await GitPolecatRegistry().remove_forced(rig, "../alpha")


@pytest.mark.asyncio
async def test_remove_forced_outside_git_is_removal_error(tmp_path: Path):
    rig = Rig("plain", tmp_path / "plain")
    (rig.path / "polecats" / "toast").mkdir(parents=True)

    with pytest.raises(RemovalError, match="not a git repository"):
        await GitPolecatRegistry().remove_forced(rig, "toast")


@pytest.mark.asyncio
async def test_collect_stale_deletes_only_orphaned_polecat_branches(rig_repo: tuple[Rig, Repo]):
    rig, repo = rig_repo
    registry = GitPolecatRegistry()
    add_polecat(rig, repo, "toast", "done")
    add_polecat(rig, repo, "nux", "working")
    repo.create_head("feature/keep")
    repo.create_head("polecat/ghost")
    await registry.remove_forced(rig, "toast")

    deleted = await registry.collect_stale(rig)

    remaining = sorted(head.name for head in repo.heads)
    assert deleted == 2
    assert "polecat/nux" in remaining
    assert "feature/keep" in remaining
    assert "polecat/toast" not in remaining
    assert "polecat/ghost" not in remaining


@pytest.mark.asyncio
async def test_cleanup_run_against_real_worktrees(rig_repo: tuple[Rig, Repo]):
    rig, repo = rig_repo
    registry = GitPolecatRegistry()
    done_dir = add_polecat(rig, repo, "toast", "done")
    live_dir = add_polecat(rig, repo, "nux", "working")
    town = FakeTown()
    collaborators = Collaborators(
        units=registry,
        sessions=town.sessions,
        convoys=town.convoys,
        branches=registry,
    )

    report = await run_cleanup(RunConfig(run_convoys=False, run_branches=True), [rig], collaborators)

    assert report.units_reclaimed == 1
    assert report.branches_collected == 1
    assert report.exit_code == 0
    assert not done_dir.exists()
    assert live_dir.exists()
    assert town.calls_of("close_unit_issue")[0][1:3] == ("alpha", "toast")
