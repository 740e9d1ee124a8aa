"""Unit tests for the bd-backed convoy store."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from rigsweep.adapters.beads import BeadsConvoyStore, polecat_issue_id
from rigsweep.adapters.process import CommandResult
from rigsweep.core.errors import AdvisoryError, CloseError, ListingError
from rigsweep.core.models import ConvoyRecord, TrackedIssue
from tests.fakes import rig

pytestmark = pytest.mark.unit

BEADS_DIR = Path("/town/.beads")


def _ok(payload: object) -> CommandResult:
    return CommandResult(0, json.dumps(payload), "")


@pytest.mark.asyncio
async def test_list_open_parses_convoys():
    store = BeadsConvoyStore(BEADS_DIR, timeout=3)
    payload = [{"id": "hq-cv-1", "title": "Auth"}, {"id": "hq-cv-2"}, {"title": "no id"}]
    with patch("rigsweep.adapters.beads.run_command", new_callable=AsyncMock, return_value=_ok(payload)) as mock_run:
        convoys = await store.list_open()

    assert convoys == [ConvoyRecord("hq-cv-1", "Auth"), ConvoyRecord("hq-cv-2", "")]
    mock_run.assert_awaited_once_with(
        ["bd", "list", "--type=convoy", "--status=open", "--json"], cwd=BEADS_DIR, timeout=3
    )


@pytest.mark.asyncio
async def test_list_open_failure_is_listing_error():
    store = BeadsConvoyStore(BEADS_DIR)
    with patch(
        "rigsweep.adapters.beads.run_command",
        new_callable=AsyncMock,
        return_value=CommandResult(1, "", "no beads database found"),
    ):
        with pytest.raises(ListingError, match="no beads database"):
            await store.list_open()


@pytest.mark.asyncio
async def test_list_open_bad_json_is_listing_error():
    store = BeadsConvoyStore(BEADS_DIR)
    with patch(
        "rigsweep.adapters.beads.run_command", new_callable=AsyncMock, return_value=CommandResult(0, "{oops", "")
    ):
        with pytest.raises(ListingError, match="parsing"):
            await store.list_open()


@pytest.mark.asyncio
async def test_empty_output_means_no_convoys():
    store = BeadsConvoyStore(BEADS_DIR)
    with patch("rigsweep.adapters.beads.run_command", new_callable=AsyncMock, return_value=CommandResult(0, "", "")):
        assert await store.list_open() == []


@pytest.mark.asyncio
async def test_tracked_issues_default_missing_status_to_unknown():
    store = BeadsConvoyStore(BEADS_DIR)
    payload = [{"id": "gt-1", "status": "closed"}, {"id": "gt-2"}]
    with patch("rigsweep.adapters.beads.run_command", new_callable=AsyncMock, return_value=_ok(payload)) as mock_run:
        tracked = await store.tracked_issues("hq-cv-1")

    assert tracked == [TrackedIssue("gt-1", "closed"), TrackedIssue("gt-2", "unknown")]
    assert mock_run.await_args.args[0] == ["bd", "dep", "list", "hq-cv-1", "--type=tracks", "--json"]


@pytest.mark.asyncio
async def test_close_failure_is_close_error():
    store = BeadsConvoyStore(BEADS_DIR)
    with patch(
        "rigsweep.adapters.beads.run_command", new_callable=AsyncMock, return_value=CommandResult(1, "", "locked")
    ):
        with pytest.raises(CloseError, match="locked"):
            await store.close("hq-cv-1", "All tracked issues closed")


@pytest.mark.asyncio
async def test_close_unit_issue_runs_in_rig_directory():
    store = BeadsConvoyStore(BEADS_DIR, issue_prefix="gt")
    alpha = rig("alpha")
    with patch(
        "rigsweep.adapters.beads.run_command", new_callable=AsyncMock, return_value=CommandResult(0, "", "")
    ) as mock_run:
        await store.close_unit_issue(alpha, "toast", "Nuked")

    mock_run.assert_awaited_once()
    assert mock_run.await_args.args[0] == ["bd", "close", "gt-alpha-polecat-toast", "-r", "Nuked"]
    assert mock_run.await_args.kwargs["cwd"] == alpha.path


@pytest.mark.asyncio
async def test_close_unit_issue_failures_are_advisory():
    store = BeadsConvoyStore(BEADS_DIR)
    with patch("rigsweep.adapters.beads.run_command", new_callable=AsyncMock, side_effect=FileNotFoundError("bd")):
        with pytest.raises(AdvisoryError):
            await store.close_unit_issue(rig("alpha"), "toast", "Nuked")


def test_polecat_issue_id():
    assert polecat_issue_id("gt", "alpha", "toast") == "gt-alpha-polecat-toast"
