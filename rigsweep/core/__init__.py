"""Cleanup reconciliation engine."""

from rigsweep.core.engine import Collaborators, run_cleanup
from rigsweep.core.models import Rig, RunConfig, RunReport

__all__ = ["Collaborators", "Rig", "RunConfig", "RunReport", "run_cleanup"]
