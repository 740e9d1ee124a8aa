"""Concrete collaborators: git worktrees, tmux sessions and the beads CLI."""

from rigsweep.adapters.beads import BeadsConvoyStore
from rigsweep.adapters.polecats import GitPolecatRegistry
from rigsweep.adapters.tmux_sessions import TmuxSessionRegistry

__all__ = ["BeadsConvoyStore", "GitPolecatRegistry", "TmuxSessionRegistry"]
