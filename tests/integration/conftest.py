"""Shared fixtures for integration tests: real git repositories as rigs."""

from pathlib import Path

import pytest
import yaml
from git import Actor, Repo

from rigsweep.core.models import Rig

AUTHOR = Actor("Rig Tester", "rigs@example.com")


@pytest.fixture
def rig_repo(tmp_path: Path) -> tuple[Rig, Repo]:
    """A rig whose path is a git checkout with one commit."""
    path = tmp_path / "alpha"
    repo = Repo.init(path)
    (path / "README.md").write_text("alpha rig\n", encoding="utf-8")
    repo.index.add(["README.md"])
    repo.index.commit("initial commit", author=AUTHOR, committer=AUTHOR)
    return Rig(name="alpha", path=path), repo


def add_polecat(rig: Rig, repo: Repo, name: str, state: str | None) -> Path:
    """Create polecat ``name`` as a worktree on branch polecat/<name>."""
    unit_dir = rig.path / "polecats" / name
    unit_dir.parent.mkdir(exist_ok=True)
    repo.git.worktree("add", str(unit_dir), "-b", f"polecat/{name}")
    if state is not None:
        state_dir = unit_dir / ".polecat"
        state_dir.mkdir()
        (state_dir / "state.yaml").write_text(yaml.safe_dump({"state": state}), encoding="utf-8")
    return unit_dir
