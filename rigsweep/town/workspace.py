"""Locate the town root: the directory holding mayor/ and all rigs."""

from __future__ import annotations

import os
from pathlib import Path

from rigsweep.constants import MAYOR_DIR, TOWN_MARKER_FILES, TOWN_ROOT_ENV
from rigsweep.core.errors import ConfigError


def is_town_root(path: Path) -> bool:
    mayor = path / MAYOR_DIR
    return any((mayor / marker).is_file() for marker in TOWN_MARKER_FILES)


def find_town_root(start: Path | None = None) -> Path:
    """Walk up from ``start`` (default: cwd) to the nearest town root.

    Without an explicit ``start``, RIGSWEEP_TOWN_ROOT (when set) names the
    root directly.

    Raises:
        ConfigError: If no town root is found
    """
    override = os.getenv(TOWN_ROOT_ENV)
    if start is None and override:
        root = Path(override).expanduser().resolve()
        if not is_town_root(root):
            raise ConfigError(f"{TOWN_ROOT_ENV}={override} is not a town root (no {MAYOR_DIR}/ marker)")
        return root

    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if is_town_root(candidate):
            return candidate
    raise ConfigError(f"not in a town workspace: no {MAYOR_DIR}/ marker above {current}")
