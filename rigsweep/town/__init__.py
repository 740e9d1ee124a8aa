"""Town workspace layout: root resolution and rig discovery."""

from rigsweep.town.rigs import TownRigDirectory
from rigsweep.town.workspace import find_town_root, is_town_root

__all__ = ["TownRigDirectory", "find_town_root", "is_town_root"]
