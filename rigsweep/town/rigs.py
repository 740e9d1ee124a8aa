"""Rig discovery from the town's rig registry."""

from __future__ import annotations

from pathlib import Path

from instrukt_ai_logging import get_logger

from rigsweep.config.loader import load_rigs_registry
from rigsweep.core.models import Rig

logger = get_logger(__name__)


class TownRigDirectory:
    """Rigs registered in <town>/mayor/rigs.json, in name order.

    A rig path defaults to <town>/<name>; relative paths resolve against the
    town root. Registered rigs whose directory is missing are skipped.
    """

    def __init__(self, town_root: Path) -> None:
        self._town_root = town_root

    def _resolve_path(self, name: str, raw_path: str | None) -> Path:
        if not raw_path:
            return self._town_root / name
        path = Path(raw_path).expanduser()
        return path if path.is_absolute() else self._town_root / path

    def discover(self) -> list[Rig]:
        registry = load_rigs_registry(self._town_root)
        rigs: list[Rig] = []
        for name in sorted(registry.rigs):
            path = self._resolve_path(name, registry.rigs[name].path)
            if not path.is_dir():
                logger.warning("Rig %s is registered but %s does not exist, skipping", name, path)
                continue
            rigs.append(Rig(name=name, path=path))
        logger.debug("Discovered %d rig(s) in %s", len(rigs), self._town_root)
        return rigs
