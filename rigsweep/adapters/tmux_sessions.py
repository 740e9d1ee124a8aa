"""tmux-backed session registry for polecats.

Session names follow ``<prefix>-<rig>-<polecat>``.
"""

from __future__ import annotations

import asyncio

from instrukt_ai_logging import get_logger

from rigsweep.adapters.process import CommandResult, SubprocessTimeoutError, run_command
from rigsweep.constants import COMMAND_TIMEOUT_SECONDS, SESSION_PREFIX, STOP_GRACE_SECONDS, TMUX_BINARY
from rigsweep.core.errors import SessionQueryError, StopError
from rigsweep.core.models import Rig

logger = get_logger(__name__)


class TmuxSessionRegistry:
    def __init__(
        self,
        *,
        prefix: str = SESSION_PREFIX,
        tmux_binary: str = TMUX_BINARY,
        stop_grace_seconds: float = STOP_GRACE_SECONDS,
        timeout: float = COMMAND_TIMEOUT_SECONDS,
    ) -> None:
        self._prefix = prefix
        self._tmux = tmux_binary
        self._grace = stop_grace_seconds
        self._timeout = timeout

    def session_name(self, rig: Rig, name: str) -> str:
        return f"{self._prefix}-{rig.name}-{name}"

    async def _tmux_cmd(self, *args: str) -> CommandResult:
        return await run_command([self._tmux, *args], timeout=self._timeout)

    async def is_running(self, rig: Rig, name: str) -> bool:
        session = self.session_name(rig, name)
        try:
            # "=" forces an exact match instead of tmux's prefix matching.
            result = await self._tmux_cmd("has-session", "-t", f"={session}")
        except (OSError, SubprocessTimeoutError) as exc:
            raise SessionQueryError(f"tmux has-session {session}: {exc}") from exc

        if not result.ok:
            logger.debug("Session %s is not running: %s", session, result.stderr)
        return result.ok

    async def stop(self, rig: Rig, name: str, force: bool) -> None:
        """Stop the polecat's session.

        Without ``force`` the session gets a C-c and a grace period first. A
        session that is already gone counts as stopped.
        """
        session = self.session_name(rig, name)
        try:
            if not force:
                await self._tmux_cmd("send-keys", "-t", f"={session}", "C-c")
                await asyncio.sleep(self._grace)
            result = await self._tmux_cmd("kill-session", "-t", f"={session}")
        except (OSError, SubprocessTimeoutError) as exc:
            raise StopError(f"tmux kill-session {session}: {exc}") from exc

        if result.ok:
            logger.debug("Killed session %s", session)
            return
        try:
            still_running = await self.is_running(rig, name)
        except SessionQueryError as exc:
            raise StopError(f"tmux kill-session {session} exited {result.returncode}: {exc}") from exc
        if not still_running:
            logger.debug("Session %s already gone: %s", session, result.stderr)
            return
        raise StopError(f"tmux kill-session {session} exited {result.returncode}: {result.stderr}")
