"""Async subprocess helpers shared by the tmux and beads adapters."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

from instrukt_ai_logging import get_logger

logger = get_logger(__name__)


class SubprocessTimeoutError(RuntimeError):
    """Raised when an external command does not finish in time."""


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def communicate_with_timeout(process: asyncio.subprocess.Process, timeout: float, operation: str) -> tuple[bytes, bytes]:
    """Wait for process output, killing the process when ``timeout`` expires."""
    try:
        return await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.error("%s timed out after %.1fs (pid=%s), killing", operation, timeout, process.pid)
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()
        raise SubprocessTimeoutError(f"{operation} timed out after {timeout:.1f}s") from exc


async def run_command(argv: list[str], *, cwd: Path | None = None, timeout: float) -> CommandResult:
    """Run ``argv`` and capture its output.

    Raises:
        FileNotFoundError: If the binary is missing
        SubprocessTimeoutError: If the command exceeds ``timeout``
    """
    process = await asyncio.create_subprocess_exec(
        *argv,
        cwd=str(cwd) if cwd else None,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await communicate_with_timeout(process, timeout, " ".join(argv[:3]))
    return CommandResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace").strip(),
    )
