"""Convoy store backed by the ``bd`` (beads) issue tracker CLI.

Convoys live in the town-level beads database (<town>/.beads); per-polecat
tracking issues live in each rig's own database, so those commands run with
the rig as working directory.
"""

from __future__ import annotations

import json
from pathlib import Path

from instrukt_ai_logging import get_logger

from rigsweep.adapters.process import CommandResult, SubprocessTimeoutError, run_command
from rigsweep.constants import BEADS_BINARY, BEADS_ISSUE_PREFIX, COMMAND_TIMEOUT_SECONDS
from rigsweep.core.errors import AdvisoryError, CloseError, ListingError
from rigsweep.core.models import ConvoyRecord, Rig, TrackedIssue

logger = get_logger(__name__)


def polecat_issue_id(prefix: str, rig_name: str, polecat_name: str) -> str:
    """Tracking issue id of a polecat, e.g. ``gt-alpha-polecat-toast``."""
    return f"{prefix}-{rig_name}-polecat-{polecat_name}"


def _parse_json_list(output: str, what: str) -> list[dict[str, object]]:
    text = output.strip()
    if not text:
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ListingError(f"parsing {what}: {exc}") from exc
    if data is None:
        return []
    if not isinstance(data, list):
        raise ListingError(f"parsing {what}: expected a JSON list, got {type(data).__name__}")
    return [item for item in data if isinstance(item, dict)]


class BeadsConvoyStore:
    def __init__(
        self,
        beads_dir: Path,
        *,
        binary: str = BEADS_BINARY,
        issue_prefix: str = BEADS_ISSUE_PREFIX,
        timeout: float = COMMAND_TIMEOUT_SECONDS,
    ) -> None:
        self._beads_dir = beads_dir
        self._binary = binary
        self._issue_prefix = issue_prefix
        self._timeout = timeout

    async def _bd(self, *args: str, cwd: Path) -> CommandResult:
        return await run_command([self._binary, *args], cwd=cwd, timeout=self._timeout)

    async def _query(self, *args: str, what: str) -> list[dict[str, object]]:
        try:
            result = await self._bd(*args, "--json", cwd=self._beads_dir)
        except (OSError, SubprocessTimeoutError) as exc:
            raise ListingError(f"{what}: {exc}") from exc
        if not result.ok:
            raise ListingError(f"{what}: bd exited {result.returncode}: {result.stderr}")
        return _parse_json_list(result.stdout, what)

    async def list_open(self) -> list[ConvoyRecord]:
        items = await self._query("list", "--type=convoy", "--status=open", what="listing convoys")
        convoys: list[ConvoyRecord] = []
        for item in items:
            convoy_id = item.get("id")
            if not isinstance(convoy_id, str) or not convoy_id:
                logger.warning("Skipping convoy entry without id: %s", item)
                continue
            title = item.get("title")
            convoys.append(ConvoyRecord(id=convoy_id, title=title if isinstance(title, str) else ""))
        return convoys

    async def tracked_issues(self, convoy_id: str) -> list[TrackedIssue]:
        items = await self._query("dep", "list", convoy_id, "--type=tracks", what=f"tracked issues of {convoy_id}")
        issues: list[TrackedIssue] = []
        for item in items:
            issue_id = item.get("id")
            status = item.get("status")
            issues.append(
                TrackedIssue(
                    id=issue_id if isinstance(issue_id, str) else "",
                    # Unknown status never counts as resolved.
                    status=status if isinstance(status, str) else "unknown",
                )
            )
        return issues

    async def close(self, convoy_id: str, reason: str) -> None:
        try:
            result = await self._bd("close", convoy_id, "-r", reason, cwd=self._beads_dir)
        except (OSError, SubprocessTimeoutError) as exc:
            raise CloseError(f"bd close {convoy_id}: {exc}") from exc
        if not result.ok:
            raise CloseError(f"bd close {convoy_id} exited {result.returncode}: {result.stderr}")

    async def close_unit_issue(self, rig: Rig, name: str, reason: str) -> None:
        issue_id = polecat_issue_id(self._issue_prefix, rig.name, name)
        try:
            result = await self._bd("close", issue_id, "-r", reason, cwd=rig.path)
        except (OSError, SubprocessTimeoutError) as exc:
            raise AdvisoryError(f"bd close {issue_id}: {exc}") from exc
        if not result.ok:
            raise AdvisoryError(f"bd close {issue_id} exited {result.returncode}: {result.stderr}")
