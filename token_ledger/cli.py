"""
token-ledger - command line over a token state file.

Every invocation loads the CBOR snapshot, runs one operation through
:class:`~token_ledger.host.TokenHost`, and (for successful mutations) saves the
snapshot back and appends the emitted events to the JSONL event log.

Global options:
  --state PATH        Snapshot file (env TOKEN_LEDGER_STATE)
  --events PATH       Event log (env TOKEN_LEDGER_EVENTS)
  --log-level LEVEL   Logging level (env TOKEN_LEDGER_LOG_LEVEL)

Examples:
  token-ledger init --owner 0x01
  token-ledger mint --caller 0x01 --to 0xaa --amount 1000
  token-ledger transfer --caller 0xaa --to 0xbb --amount 10
  token-ledger batch-transfer --caller 0xaa --to 0xbb:5 --to 0xcc:7
  token-ledger balance 0xaa
  token-ledger status

Results are printed as JSON. A reverted call exits with status 1; a missing or
unreadable state file exits with status 2.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import typer

from . import snapshot
from .config import LOG_LEVELS, LedgerConfig, load_config
from .context import to_hex
from .errors import LedgerError
from .events import JsonlEventSink
from .host import TokenHost
from .storage import MemoryBackend
from .version import __version__

log = logging.getLogger(__name__)

app = typer.Typer(
    name="token-ledger",
    help="Fungible token ledger: mint, transfer, allowances, pause and blacklist.",
    no_args_is_help=True,
    add_completion=False,
)


class GlobalContext:
    def __init__(self) -> None:
        self.config: LedgerConfig = load_config()

    @property
    def state_path(self) -> Path:
        return self.config.state_path

    @property
    def events_path(self) -> Path:
        return self.config.events_path


_ctx = GlobalContext()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    state: Optional[Path] = typer.Option(None, "--state", help="Path to the state snapshot"),
    events: Optional[Path] = typer.Option(None, "--events", help="Path to the JSONL event log"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ..."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """
    Operate one token instance stored in a snapshot file.

    Flags override environment variables, which override built-in defaults.
    """
    overrides: Dict[str, Any] = {}
    if state is not None:
        overrides["state_path"] = state
    if events is not None:
        overrides["events_path"] = events
    if log_level is not None:
        level = log_level.strip().upper()
        if level not in LOG_LEVELS:
            raise typer.BadParameter(
                f"expected one of {', '.join(LOG_LEVELS)}", param_hint="--log-level"
            )
        overrides["log_level"] = level
    _ctx.config = replace(load_config(), **overrides)
    logging.basicConfig(
        level=_ctx.config.log_level_value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ----------------------------- helpers ---------------------------------------


def _emit(obj: Dict[str, Any]) -> None:
    typer.echo(json.dumps(obj, indent=2, sort_keys=True))


def _die(msg: str, code: int = 2) -> None:
    typer.echo(msg.rstrip(), err=True)
    raise typer.Exit(code)


def _open_host() -> Tuple[TokenHost, MemoryBackend]:
    path = _ctx.state_path
    if not path.exists():
        _die(f"state file not found: {path} (run 'token-ledger init' first)")
    try:
        backend = snapshot.load(path)
    except snapshot.SnapshotError as e:
        _die(f"cannot read state file {path}: {e}")
    host = TokenHost(backend, JsonlEventSink(str(_ctx.events_path)))
    if not host.is_initialized:
        host.close()
        _die(f"state file {path} holds no initialized token")
    return host, backend


def _run(caller: str, method: str, *args: Any) -> None:
    host, backend = _open_host()
    try:
        res = host.call(caller, method, *args)
        if res.ok:
            snapshot.save(_ctx.state_path, backend)
    finally:
        host.close()
    _emit(res.to_dict())
    if not res.ok:
        raise typer.Exit(1)


def _query(method: str, *args: Any) -> Any:
    host, _ = _open_host()
    try:
        return host.query(method, *args)
    except LedgerError as e:
        _emit({"status": "REVERT", "error": e.to_dict()})
        raise typer.Exit(1)
    finally:
        host.close()


def _parse_pair(raw: str) -> Tuple[str, int]:
    acct, sep, amount = raw.rpartition(":")
    if not sep or not acct:
        raise typer.BadParameter(f"expected HEX:AMOUNT, got {raw!r}")
    try:
        return acct, int(amount, 0)
    except ValueError as e:
        raise typer.BadParameter(f"bad amount in {raw!r}") from e


# ----------------------------- commands --------------------------------------


@app.command()
def init(owner: str = typer.Option(..., "--owner", help="Owner account (hex)")) -> None:
    """Create a new token state owned by OWNER."""
    path = _ctx.state_path
    if path.exists():
        _die(f"state file already exists: {path}", code=1)
    try:
        host = TokenHost.deploy(owner, sink=JsonlEventSink(str(_ctx.events_path)))
    except LedgerError as e:
        _emit({"status": "REVERT", "error": e.to_dict()})
        raise typer.Exit(1)
    try:
        snapshot.save(path, host.backend)
    finally:
        host.close()
    log.info("initialized %s", path)
    _emit({"status": "OK", "owner": to_hex(host.token.owner() or b""), "state": str(path)})


@app.command()
def mint(
    caller: str = typer.Option(..., "--caller"),
    to: str = typer.Option(..., "--to"),
    amount: int = typer.Option(..., "--amount"),
) -> None:
    """Create AMOUNT new tokens for TO (owner only)."""
    _run(caller, "mint", to, amount)


@app.command()
def transfer(
    caller: str = typer.Option(..., "--caller"),
    to: str = typer.Option(..., "--to"),
    amount: int = typer.Option(..., "--amount"),
) -> None:
    """Move AMOUNT from CALLER to TO."""
    _run(caller, "transfer", to, amount)


@app.command()
def burn(
    caller: str = typer.Option(..., "--caller"),
    amount: int = typer.Option(..., "--amount"),
) -> None:
    """Destroy AMOUNT of CALLER's tokens."""
    _run(caller, "burn", amount)


@app.command()
def approve(
    caller: str = typer.Option(..., "--caller"),
    spender: str = typer.Option(..., "--spender"),
    amount: int = typer.Option(..., "--amount"),
) -> None:
    """Set SPENDER's allowance on CALLER's balance to AMOUNT."""
    _run(caller, "approve", spender, amount)


@app.command("transfer-from")
def transfer_from(
    caller: str = typer.Option(..., "--caller", help="Spender"),
    owner: str = typer.Option(..., "--from", help="Account whose allowance is spent"),
    to: str = typer.Option(..., "--to"),
    amount: int = typer.Option(..., "--amount"),
) -> None:
    """Spend CALLER's allowance on FROM, paying TO."""
    _run(caller, "transfer_from", owner, to, amount)


@app.command("batch-transfer")
def batch_transfer(
    caller: str = typer.Option(..., "--caller"),
    to: List[str] = typer.Option([], "--to", help="Recipient as HEX:AMOUNT (repeatable)"),
) -> None:
    """Pay several recipients from CALLER in one all-or-nothing call."""
    pairs = [_parse_pair(p) for p in to]
    _run(caller, "batch_transfer", [a for a, _ in pairs], [n for _, n in pairs])


@app.command()
def pause(caller: str = typer.Option(..., "--caller")) -> None:
    """Halt all balance and allowance changes (owner only)."""
    _run(caller, "pause")


@app.command()
def unpause(caller: str = typer.Option(..., "--caller")) -> None:
    """Resume normal operation (owner only)."""
    _run(caller, "unpause")


@app.command()
def blacklist(
    caller: str = typer.Option(..., "--caller"),
    account: str = typer.Argument(..., help="Account to bar"),
) -> None:
    """Bar ACCOUNT from sending, receiving and approving (owner only)."""
    _run(caller, "blacklist", account)


@app.command()
def unblacklist(
    caller: str = typer.Option(..., "--caller"),
    account: str = typer.Argument(..., help="Account to restore"),
) -> None:
    """Lift the bar on ACCOUNT (owner only)."""
    _run(caller, "unblacklist", account)


@app.command()
def balance(account: str = typer.Argument(...)) -> None:
    """Print ACCOUNT's balance."""
    _emit({"account": account, "balance": _query("balance_of", account)})


@app.command()
def allowance(owner: str = typer.Argument(...), spender: str = typer.Argument(...)) -> None:
    """Print SPENDER's remaining allowance on OWNER."""
    _emit({"owner": owner, "spender": spender, "allowance": _query("allowance", owner, spender)})


@app.command()
def status() -> None:
    """Print owner, paused flag and state root."""
    host, backend = _open_host()
    try:
        owner = host.query("owner")
        paused = host.query("is_paused")
    finally:
        host.close()
    _emit(
        {
            "owner": to_hex(owner) if owner else None,
            "paused": paused,
            "entries": len(backend),
            "state_root": to_hex(snapshot.state_root(backend)),
            "config": _ctx.config.as_dict(),
        }
    )


def main() -> None:
    """Entry point for the token-ledger CLI."""
    app()


if __name__ == "__main__":
    main()
