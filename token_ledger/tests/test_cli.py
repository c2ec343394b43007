from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from token_ledger.cli import app

from .conftest import ALICE, BOB, CAROL, OWNER, hexa

runner = CliRunner()


@pytest.fixture
def paths(tmp_path):
    return tmp_path / "state.cbor", tmp_path / "events.jsonl"


@pytest.fixture
def cli(paths):
    state, events = paths

    def invoke(*args):
        return runner.invoke(app, ["--state", str(state), "--events", str(events), *args])

    return invoke


@pytest.fixture
def initialized(cli):
    res = cli("init", "--owner", hexa(OWNER))
    assert res.exit_code == 0, res.output
    return cli


def _json(res):
    return json.loads(res.stdout)


def test_init_creates_state(initialized, paths):
    state, _ = paths
    assert state.exists()
    res = initialized("status")
    assert res.exit_code == 0
    out = _json(res)
    assert out["owner"] == hexa(OWNER)
    assert out["paused"] is False
    assert out["state_root"].startswith("0x")


def test_init_refuses_existing_state(initialized):
    res = initialized("init", "--owner", hexa(ALICE))
    assert res.exit_code == 1


def test_commands_need_initialized_state(cli):
    res = cli("balance", hexa(ALICE))
    assert res.exit_code == 2


def test_state_persists_between_invocations(initialized, paths):
    _, events = paths
    res = initialized("mint", "--caller", hexa(OWNER), "--to", hexa(ALICE), "--amount", "100")
    assert res.exit_code == 0, res.output
    out = _json(res)
    assert out["status"] == "OK"
    assert out["events"] == [{"name": "Mint", "args": {"to": hexa(ALICE), "amount": 100}}]

    res = initialized("transfer", "--caller", hexa(ALICE), "--to", hexa(BOB), "--amount", "30")
    assert res.exit_code == 0, res.output

    assert _json(initialized("balance", hexa(ALICE)))["balance"] == 70
    assert _json(initialized("balance", hexa(BOB)))["balance"] == 30

    lines = events.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["name"] for line in lines] == ["Mint", "Transfer"]


def test_reverted_call_exits_1_and_keeps_state(initialized, paths):
    state, _ = paths
    before = state.read_bytes()
    res = initialized("transfer", "--caller", hexa(ALICE), "--to", hexa(BOB), "--amount", "1")
    assert res.exit_code == 1
    assert "INSUFFICIENT_BALANCE" in res.output
    assert state.read_bytes() == before


def test_allowance_flow(initialized):
    initialized("mint", "--caller", hexa(OWNER), "--to", hexa(ALICE), "--amount", "50")
    res = initialized("approve", "--caller", hexa(ALICE), "--spender", hexa(BOB), "--amount", "20")
    assert res.exit_code == 0, res.output
    res = initialized(
        "transfer-from",
        "--caller", hexa(BOB),
        "--from", hexa(ALICE),
        "--to", hexa(CAROL),
        "--amount", "15",
    )
    assert res.exit_code == 0, res.output
    assert _json(initialized("allowance", hexa(ALICE), hexa(BOB)))["allowance"] == 5
    assert _json(initialized("balance", hexa(CAROL)))["balance"] == 15


def test_batch_transfer_and_burn(initialized):
    initialized("mint", "--caller", hexa(OWNER), "--to", hexa(ALICE), "--amount", "100")
    res = initialized(
        "batch-transfer",
        "--caller", hexa(ALICE),
        "--to", f"{hexa(BOB)}:10",
        "--to", f"{hexa(CAROL)}:15",
    )
    assert res.exit_code == 0, res.output
    out = _json(res)
    assert out["value"] == 25
    assert len(out["events"]) == 2

    res = initialized("burn", "--caller", hexa(ALICE), "--amount", "75")
    assert res.exit_code == 0, res.output
    assert _json(initialized("balance", hexa(ALICE)))["balance"] == 0


def test_batch_transfer_rejects_malformed_pair(initialized):
    res = initialized("batch-transfer", "--caller", hexa(ALICE), "--to", "nocolon")
    assert res.exit_code != 0


def test_pause_and_blacklist(initialized):
    initialized("mint", "--caller", hexa(OWNER), "--to", hexa(ALICE), "--amount", "10")

    assert initialized("pause", "--caller", hexa(OWNER)).exit_code == 0
    assert _json(initialized("status"))["paused"] is True
    res = initialized("transfer", "--caller", hexa(ALICE), "--to", hexa(BOB), "--amount", "1")
    assert res.exit_code == 1
    assert "PAUSED" in res.output
    assert initialized("unpause", "--caller", hexa(OWNER)).exit_code == 0

    assert initialized("blacklist", "--caller", hexa(OWNER), hexa(BOB)).exit_code == 0
    res = initialized("transfer", "--caller", hexa(ALICE), "--to", hexa(BOB), "--amount", "1")
    assert res.exit_code == 1
    assert "BLACKLISTED" in res.output
    assert initialized("unblacklist", "--caller", hexa(OWNER), hexa(BOB)).exit_code == 0
    res = initialized("transfer", "--caller", hexa(ALICE), "--to", hexa(BOB), "--amount", "1")
    assert res.exit_code == 0, res.output


def test_non_owner_cannot_pause(initialized):
    res = initialized("pause", "--caller", hexa(ALICE))
    assert res.exit_code == 1
    assert "UNAUTHORIZED" in res.output


def test_invalid_account_in_view(initialized):
    res = initialized("balance", "0xzz")
    assert res.exit_code == 1
    assert "INVALID_ACCOUNT" in res.output


def test_version():
    res = runner.invoke(app, ["--version"])
    assert res.exit_code == 0
    assert res.stdout.strip()


def test_status_reports_effective_config(initialized, paths):
    state, events = paths
    out = _json(initialized("status"))
    assert out["config"]["state_path"] == str(state)
    assert out["config"]["events_path"] == str(events)
    assert out["config"]["log_level"] == "WARNING"


def test_log_level_option(paths):
    state, events = paths
    res = runner.invoke(
        app, ["--state", str(state), "--events", str(events), "--log-level", "debug", "init", "--owner", hexa(OWNER)]
    )
    assert res.exit_code == 0, res.output

    res = runner.invoke(app, ["--state", str(state), "--log-level", "chatty", "status"])
    assert res.exit_code != 0
