"""
token_ledger.host - the execution environment around one token.

The ledger core expects its environment to supply the caller and to make each
call all-or-nothing. :class:`TokenHost` is that environment for Python callers:

- calls are serialized with a re-entrant lock (cross-call ordering is the
  order in which callers acquire it);
- every write of a call is staged in a :class:`~token_ledger.journal.Journal`,
  and every event in a
  :class:`~token_ledger.events.BufferedEventSink`;
- on success both are committed (backend written, events forwarded);
- on a :class:`~token_ledger.errors.LedgerError` both are dropped and the
  failure is *returned* as a :class:`CallResult`, never raised;
- any other exception is a bug: staged state is dropped and it propagates;
- a backend failure while committing restores the backend and drops the
  call's events before propagating.

Usage
-----
    host = TokenHost.deploy(owner=b"\\x01" * 32)
    res = host.call(owner, "mint", alice, 1_000)
    assert res.ok
    host.query("balance_of", alice)   # -> 1000
"""

from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from .context import CallContext, require_account, to_hex
from .errors import LedgerError, UnknownMethod, ValidationError, error_to_receipt_fields
from .events import BufferedEventSink, EventSink, InMemoryEventSink, TokenEvent
from .journal import Journal
from .state import TokenState
from .storage import MemoryBackend, StorageBackend
from .token import Token

log = logging.getLogger(__name__)

MUTATIONS: FrozenSet[str] = frozenset(
    {
        "mint",
        "transfer",
        "burn",
        "approve",
        "transfer_from",
        "batch_transfer",
        "pause",
        "unpause",
        "blacklist",
        "unblacklist",
    }
)

VIEWS: FrozenSet[str] = frozenset(
    {"balance_of", "allowance", "is_paused", "is_blacklisted", "owner"}
)


@dataclass
class CallResult:
    """Outcome of one host call. ``status`` is "OK" or "REVERT"."""

    seq: int
    method: str
    caller: Any
    status: str
    events: List[TokenEvent] = field(default_factory=list)
    error: Optional[Dict[str, Any]] = None
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.status == "OK"

    def to_dict(self) -> Dict[str, Any]:
        caller = to_hex(self.caller) if isinstance(self.caller, (bytes, bytearray)) else str(self.caller)
        out: Dict[str, Any] = {
            "seq": self.seq,
            "method": self.method,
            "caller": caller,
            "status": self.status,
            "events": [e.to_dict() for e in self.events],
        }
        if self.value is not None:
            out["value"] = self.value
        if self.error is not None:
            out["error"] = self.error
        return out


class TokenHost:
    def __init__(
        self,
        backend: Optional[StorageBackend] = None,
        sink: Optional[EventSink] = None,
        *,
        account_size: Optional[int] = None,
    ) -> None:
        self.backend = backend if backend is not None else MemoryBackend()
        self.sink = sink if sink is not None else InMemoryEventSink()
        self.journal = Journal(self.backend)
        self._events = BufferedEventSink(self.sink)
        self.token = Token(TokenState(self.journal), self._events, account_size=account_size)
        self._lock = threading.RLock()
        self._seq = 0

    @classmethod
    def deploy(
        cls,
        owner: Any,
        backend: Optional[StorageBackend] = None,
        sink: Optional[EventSink] = None,
        *,
        account_size: Optional[int] = None,
    ) -> "TokenHost":
        """Create a host over a fresh state owned by `owner`."""
        host = cls(backend, sink, account_size=account_size)
        with host._lock:
            try:
                owner_b = require_account(owner, size=host.token.account_size, name="owner")
                host.token.state.initialize(owner_b)
            except Exception:
                host.journal.revert()
                raise
            host.journal.commit()
        return host

    @property
    def is_initialized(self) -> bool:
        return self.token.state.is_initialized()

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    def _resolve(self, method: str, allowed: FrozenSet[str]) -> Callable[..., Any]:
        if method not in allowed:
            raise UnknownMethod(f"unknown method {method!r}", data={"method": method})
        return getattr(self.token, method)

    @staticmethod
    def _bind(fn: Callable[..., Any], method: str, *args: Any) -> None:
        try:
            inspect.signature(fn).bind(*args)
        except TypeError as e:
            raise ValidationError(
                f"bad arguments for {method}: {e}", data={"method": method}
            ) from e

    def call(self, caller: Any, method: str, *args: Any) -> CallResult:
        """Run one mutating operation atomically on behalf of `caller`."""
        with self._lock:
            self._seq += 1
            seq = self._seq
            try:
                ctx = CallContext(caller=to_caller(caller), method=method, args=args, seq=seq)
                fn = self._resolve(method, MUTATIONS)
                self._bind(fn, method, ctx.caller, *args)
                value = fn(ctx.caller, *args)
            except LedgerError as err:
                self.journal.revert()
                dropped = self._events.discard()
                log.warning(
                    "call #%d %s reverted: %s (dropped %d events)", seq, method, err, len(dropped)
                )
                fields = error_to_receipt_fields(err)
                return CallResult(
                    seq=seq, method=method, caller=caller, status=fields["status"], error=fields["error"]
                )
            except Exception:
                self.journal.revert()
                self._events.discard()
                raise

            writes = len(self.journal.pending_keys())
            try:
                self.journal.commit()
            except Exception:
                self._events.discard()
                raise
            events = self._events.commit()
            self.sink.flush()
            log.info("call %s ok writes=%d events=%d", ctx.to_dict(), writes, len(events))
            return CallResult(
                seq=seq, method=method, caller=ctx.caller, status="OK", events=events, value=value
            )

    def query(self, method: str, *args: Any) -> Any:
        """Read-only view; raises LedgerError on bad input."""
        with self._lock:
            fn = self._resolve(method, VIEWS)
            self._bind(fn, method, *args)
            return fn(*args)

    def close(self) -> None:
        self.sink.close()


def to_caller(value: Any) -> bytes:
    """Normalize a caller id (bytes or hex) without length policy."""
    return require_account(value, name="caller")


__all__ = ["MUTATIONS", "VIEWS", "CallResult", "TokenHost"]
