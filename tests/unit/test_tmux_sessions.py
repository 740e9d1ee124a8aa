"""Unit tests for the tmux session registry."""

from unittest.mock import AsyncMock, patch

import pytest

from rigsweep.adapters.process import CommandResult, SubprocessTimeoutError
from rigsweep.adapters.tmux_sessions import TmuxSessionRegistry
from rigsweep.core.errors import SessionQueryError, StopError
from tests.fakes import rig

pytestmark = pytest.mark.unit

OK = CommandResult(0, "", "")
MISSING = CommandResult(1, "", "can't find session: gt-alpha-toast")


def test_session_name_uses_prefix_rig_and_polecat():
    registry = TmuxSessionRegistry(prefix="gt")
    assert registry.session_name(rig("alpha"), "toast") == "gt-alpha-toast"


@pytest.mark.asyncio
async def test_is_running_checks_exact_session_name():
    registry = TmuxSessionRegistry(timeout=5)
    with patch("rigsweep.adapters.tmux_sessions.run_command", new_callable=AsyncMock) as mock_run:
        mock_run.return_value = OK
        assert await registry.is_running(rig("alpha"), "toast") is True

    mock_run.assert_awaited_once_with(["tmux", "has-session", "-t", "=gt-alpha-toast"], timeout=5)


@pytest.mark.asyncio
async def test_is_running_false_when_session_missing():
    registry = TmuxSessionRegistry()
    with patch("rigsweep.adapters.tmux_sessions.run_command", new_callable=AsyncMock, return_value=MISSING):
        assert await registry.is_running(rig("alpha"), "toast") is False


@pytest.mark.asyncio
async def test_is_running_raises_when_tmux_missing():
    registry = TmuxSessionRegistry()
    with patch(
        "rigsweep.adapters.tmux_sessions.run_command",
        new_callable=AsyncMock,
        side_effect=FileNotFoundError("tmux"),
    ):
        with pytest.raises(SessionQueryError):
            await registry.is_running(rig("alpha"), "toast")


@pytest.mark.asyncio
async def test_force_stop_kills_without_interrupt():
    registry = TmuxSessionRegistry()
    with patch("rigsweep.adapters.tmux_sessions.run_command", new_callable=AsyncMock, return_value=OK) as mock_run:
        await registry.stop(rig("alpha"), "toast", force=True)

    assert [call.args[0][1] for call in mock_run.await_args_list] == ["kill-session"]


@pytest.mark.asyncio
async def test_graceful_stop_interrupts_then_kills():
    registry = TmuxSessionRegistry(stop_grace_seconds=0)
    with patch("rigsweep.adapters.tmux_sessions.run_command", new_callable=AsyncMock, return_value=OK) as mock_run:
        await registry.stop(rig("alpha"), "toast", force=False)

    assert [call.args[0][1] for call in mock_run.await_args_list] == ["send-keys", "kill-session"]


@pytest.mark.asyncio
async def test_stop_of_already_gone_session_succeeds():
    registry = TmuxSessionRegistry()
    with patch("rigsweep.adapters.tmux_sessions.run_command", new_callable=AsyncMock) as mock_run:
        # kill-session fails, follow-up has-session reports it is gone
        mock_run.side_effect = [MISSING, MISSING]
        await registry.stop(rig("alpha"), "toast", force=True)


@pytest.mark.asyncio
async def test_stop_fails_when_session_survives_kill():
    registry = TmuxSessionRegistry()
    with patch("rigsweep.adapters.tmux_sessions.run_command", new_callable=AsyncMock) as mock_run:
        mock_run.side_effect = [CommandResult(1, "", "permission denied"), OK]
        with pytest.raises(StopError, match="permission denied"):
            await registry.stop(rig("alpha"), "toast", force=True)


@pytest.mark.asyncio
async def test_stop_timeout_is_stop_error():
    registry = TmuxSessionRegistry()
    with patch(
        "rigsweep.adapters.tmux_sessions.run_command",
        new_callable=AsyncMock,
        side_effect=SubprocessTimeoutError("tmux kill-session timed out"),
    ):
        with pytest.raises(StopError):
            await registry.stop(rig("alpha"), "toast", force=True)
