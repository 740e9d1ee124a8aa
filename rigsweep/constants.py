"""Constants used across rigsweep.

Defaults here are overridable through rigsweep.yml unless noted.
"""

# Town layout (not user-configurable)
MAYOR_DIR = "mayor"
TOWN_MARKER_FILES = ("town.json", "rigs.json")
RIGS_CONFIG_FILE = "rigs.json"
CONFIG_FILE = "rigsweep.yml"
TOWN_ROOT_ENV = "RIGSWEEP_TOWN_ROOT"
LOG_LEVEL_ENV = "RIGSWEEP_LOG_LEVEL"

# Polecat layout
POLECATS_DIR = "polecats"
POLECAT_STATE_FILE = ".polecat/state.yaml"
POLECAT_BRANCH_PREFIX = "polecat/"

# Sessions
SESSION_PREFIX = "gt"
TMUX_BINARY = "tmux"
STOP_GRACE_SECONDS = 2.0

# Beads issue tracker
BEADS_BINARY = "bd"
BEADS_DIR = ".beads"
BEADS_ISSUE_PREFIX = "gt"

# Cleanup run
COMMAND_TIMEOUT_SECONDS = 30.0
DEFAULT_UNIT_CLOSE_REASON = "Nuked by rigsweep cleanup"
DEFAULT_CONVOY_CLOSE_REASON = "All tracked issues closed"
