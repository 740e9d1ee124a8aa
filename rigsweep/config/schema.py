from pydantic import BaseModel, ConfigDict, Field, field_validator

from rigsweep.constants import (
    BEADS_BINARY,
    BEADS_DIR,
    BEADS_ISSUE_PREFIX,
    COMMAND_TIMEOUT_SECONDS,
    DEFAULT_CONVOY_CLOSE_REASON,
    DEFAULT_UNIT_CLOSE_REASON,
    POLECAT_BRANCH_PREFIX,
    POLECATS_DIR,
    SESSION_PREFIX,
    STOP_GRACE_SECONDS,
    TMUX_BINARY,
)


class SessionsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    prefix: str = SESSION_PREFIX  # tmux name = <prefix>-<rig>-<polecat>
    tmux_binary: str = TMUX_BINARY
    stop_grace_seconds: float = Field(default=STOP_GRACE_SECONDS, ge=0)


class PolecatsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    directory: str = POLECATS_DIR
    branch_prefix: str = POLECAT_BRANCH_PREFIX

    @field_validator("branch_prefix")
    @classmethod
    def require_prefix(cls, v: str) -> str:
        # An empty prefix would make every local branch a gc candidate.
        if not v.strip():
            raise ValueError("branch_prefix must not be empty")
        return v


class BeadsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    binary: str = BEADS_BINARY
    directory: str = BEADS_DIR
    issue_prefix: str = BEADS_ISSUE_PREFIX


class CleanupConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    max_parallel_rigs: int = Field(default=1, ge=1)
    command_timeout_seconds: float = Field(default=COMMAND_TIMEOUT_SECONDS, gt=0)
    unit_close_reason: str = DEFAULT_UNIT_CLOSE_REASON
    convoy_close_reason: str = DEFAULT_CONVOY_CLOSE_REASON


class RigsweepConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    sessions: SessionsConfig = SessionsConfig()
    polecats: PolecatsConfig = PolecatsConfig()
    beads: BeadsConfig = BeadsConfig()
    cleanup: CleanupConfig = CleanupConfig()


class RigEntry(BaseModel):
    """One rig registered in mayor/rigs.json."""

    model_config = ConfigDict(extra="allow")
    path: str | None = None


class RigsRegistry(BaseModel):
    model_config = ConfigDict(extra="allow")
    version: int | None = None
    rigs: dict[str, RigEntry] = {}

    @field_validator("rigs", mode="before")
    @classmethod
    def allow_null_entries(cls, v: object) -> object:
        # `"name": null` and `"name": {}` both register a rig at <town>/<name>.
        if isinstance(v, dict):
            return {key: ({} if value is None else value) for key, value in v.items()}
        return v
