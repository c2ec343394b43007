"""
token_ledger.events - event records and pluggable sinks.

The ledger never broadcasts. It calls an injected :class:`EventSink`
capability with one of four immutable records:

- :class:`Mint`      {to, amount}
- :class:`Transfer`  {from, to, amount}
- :class:`Approval`  {owner, spender, amount}
- :class:`Burn`      {from, amount}

Shipped sinks
-------------
- InMemoryEventSink: fast, test/dev friendly; keeps all records in RAM.
- JsonlEventSink: append-only JSONL file; durable and simple to operate.
- NullEventSink: no-op sink for benchmarks or setups that ignore events.
- BufferedEventSink: holds one call's records until the host commits or
  discards them, so observers never see events of a reverted call.

Ordering: records are numbered with a per-sink sequence in emission order.
"""

from __future__ import annotations

import abc
import json
import logging
import os
import threading
from dataclasses import dataclass
from typing import (Any, ClassVar, Dict, Iterable, Iterator, List, Optional,
                    Protocol, runtime_checkable)

from .context import to_hex

log = logging.getLogger(__name__)


# =============================================================================
# Event records
# =============================================================================


@dataclass(frozen=True)
class TokenEvent(abc.ABC):
    """Abstract base of the event records; subclasses define ``args()``."""

    name: ClassVar[str] = "Event"

    @abc.abstractmethod
    def args(self) -> Dict[str, Any]:
        """Event arguments keyed by their serialized names."""

    def accounts(self) -> tuple:
        """Accounts referenced by the event (used for filtering)."""
        return tuple(v for v in self.args().values() if isinstance(v, bytes))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for k, v in self.args().items():
            out[k] = to_hex(v) if isinstance(v, bytes) else v
        return {"name": self.name, "args": out}


@dataclass(frozen=True)
class Mint(TokenEvent):
    name: ClassVar[str] = "Mint"
    to: bytes
    amount: int

    def args(self) -> Dict[str, Any]:
        return {"to": self.to, "amount": self.amount}


@dataclass(frozen=True)
class Transfer(TokenEvent):
    name: ClassVar[str] = "Transfer"
    sender: bytes
    to: bytes
    amount: int

    def args(self) -> Dict[str, Any]:
        return {"from": self.sender, "to": self.to, "amount": self.amount}


@dataclass(frozen=True)
class Approval(TokenEvent):
    name: ClassVar[str] = "Approval"
    owner: bytes
    spender: bytes
    amount: int

    def args(self) -> Dict[str, Any]:
        return {"owner": self.owner, "spender": self.spender, "amount": self.amount}


@dataclass(frozen=True)
class Burn(TokenEvent):
    name: ClassVar[str] = "Burn"
    sender: bytes
    amount: int

    def args(self) -> Dict[str, Any]:
        return {"from": self.sender, "amount": self.amount}


EVENT_TYPES: Dict[str, type] = {cls.name: cls for cls in (Mint, Transfer, Approval, Burn)}


def event_from_dict(d: Dict[str, Any]) -> TokenEvent:
    """Inverse of ``TokenEvent.to_dict`` (hex strings back to bytes)."""
    name = d.get("name")
    args = d.get("args") or {}
    if name not in EVENT_TYPES:
        raise ValueError(f"unknown event name: {name!r}")

    def _acct(k: str) -> bytes:
        return bytes.fromhex(str(args[k])[2:])

    if name == "Mint":
        return Mint(to=_acct("to"), amount=int(args["amount"]))
    if name == "Transfer":
        return Transfer(sender=_acct("from"), to=_acct("to"), amount=int(args["amount"]))
    if name == "Approval":
        return Approval(owner=_acct("owner"), spender=_acct("spender"), amount=int(args["amount"]))
    return Burn(sender=_acct("from"), amount=int(args["amount"]))


@dataclass(frozen=True)
class EventRecord:
    """An emitted event together with its position in the sink."""

    seq: int
    event: TokenEvent

    @property
    def name(self) -> str:
        return self.event.name

    def to_dict(self) -> Dict[str, Any]:
        d = self.event.to_dict()
        d["seq"] = self.seq
        return d


# =============================================================================
# Sink interface
# =============================================================================


@runtime_checkable
class EventSink(Protocol):
    def emit(self, event: TokenEvent) -> None:
        """Record a single event."""

    def flush(self) -> None:
        """Force persistence, if applicable."""

    def close(self) -> None:
        """Release resources (files, buffers)."""


def _matches(rec: EventRecord, name: Optional[str], account: Optional[bytes]) -> bool:
    if name is not None and rec.name != name:
        return False
    if account is not None and account not in rec.event.accounts():
        return False
    return True


def _limited(it: Iterable[EventRecord], limit: Optional[int]) -> Iterator[EventRecord]:
    n = 0
    for rec in it:
        if limit is not None and n >= limit:
            return
        yield rec
        n += 1


# =============================================================================
# In-memory sink
# =============================================================================


class InMemoryEventSink:
    """
    A simple, thread-safe in-memory sink.

    Suitable for unit tests and local runs; keeps everything in RAM.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: List[EventRecord] = []

    def emit(self, event: TokenEvent) -> None:
        with self._lock:
            self._records.append(EventRecord(seq=len(self._records), event=event))

    @property
    def events(self) -> List[TokenEvent]:
        with self._lock:
            return [r.event for r in self._records]

    def get_logs(
        self,
        *,
        name: Optional[str] = None,
        account: Optional[bytes] = None,
        limit: Optional[int] = None,
    ) -> List[EventRecord]:
        with self._lock:
            snapshot = list(self._records)
        return list(_limited((r for r in snapshot if _matches(r, name, account)), limit))

    def flush(self) -> None:
        return

    def close(self) -> None:
        with self._lock:
            self._records.clear()


# =============================================================================
# JSONL sink
# =============================================================================


class JsonlEventSink:
    """
    Append-only JSON Lines sink.

    Each line is ``{"seq": int, "name": str, "args": {...}}`` with accounts as
    0x-hex. The sequence continues from the last line already in the file.
    """

    def __init__(self, path: str, *, fsync: bool = False) -> None:
        self._path = os.fspath(path)
        self._fsync = fsync
        self._lock = threading.RLock()
        self._seq = self._scan_next_seq()
        self._fh = None

    @property
    def path(self) -> str:
        return self._path

    def _scan_next_seq(self) -> int:
        nxt = 0
        for rec in self._read_records():
            nxt = rec.seq + 1
        return nxt

    def _read_records(self) -> Iterator[EventRecord]:
        if not os.path.exists(self._path):
            return
        with open(self._path, "r", encoding="utf-8") as fh:
            for lineno, line in enumerate(fh, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    d = json.loads(line)
                    yield EventRecord(seq=int(d["seq"]), event=event_from_dict(d))
                except (ValueError, KeyError, TypeError) as e:
                    log.warning("skipping malformed event line %s:%d: %r", self._path, lineno, e)

    def _ensure_open(self):
        if self._fh is None:
            parent = os.path.dirname(self._path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self._fh = open(self._path, "a", encoding="utf-8")
        return self._fh

    def emit(self, event: TokenEvent) -> None:
        with self._lock:
            rec = EventRecord(seq=self._seq, event=event)
            fh = self._ensure_open()
            fh.write(json.dumps(rec.to_dict(), sort_keys=True, separators=(",", ":")) + "\n")
            self._seq += 1

    def get_logs(
        self,
        *,
        name: Optional[str] = None,
        account: Optional[bytes] = None,
        limit: Optional[int] = None,
    ) -> List[EventRecord]:
        with self._lock:
            self.flush()
            recs = [r for r in self._read_records() if _matches(r, name, account)]
        return list(_limited(recs, limit))

    def flush(self) -> None:
        with self._lock:
            if self._fh is not None:
                self._fh.flush()
                if self._fsync:
                    os.fsync(self._fh.fileno())

    def close(self) -> None:
        with self._lock:
            if self._fh is not None:
                self.flush()
                self._fh.close()
                self._fh = None


# =============================================================================
# Null & buffered sinks
# =============================================================================


class NullEventSink:
    def emit(self, event: TokenEvent) -> None:
        return

    def flush(self) -> None:
        return

    def close(self) -> None:
        return


class BufferedEventSink:
    """
    Collects the events of one call and forwards them only on ``commit()``.
    """

    def __init__(self, downstream: EventSink) -> None:
        self._downstream = downstream
        self._pending: List[TokenEvent] = []

    @property
    def downstream(self) -> EventSink:
        return self._downstream

    @property
    def pending(self) -> List[TokenEvent]:
        return list(self._pending)

    def emit(self, event: TokenEvent) -> None:
        self._pending.append(event)

    def commit(self) -> List[TokenEvent]:
        out, self._pending = self._pending, []
        for ev in out:
            self._downstream.emit(ev)
        return out

    def discard(self) -> List[TokenEvent]:
        out, self._pending = self._pending, []
        return out

    def flush(self) -> None:
        self._downstream.flush()

    def close(self) -> None:
        self._pending.clear()
        self._downstream.close()


__all__ = [
    "TokenEvent",
    "Mint",
    "Transfer",
    "Approval",
    "Burn",
    "EVENT_TYPES",
    "event_from_dict",
    "EventRecord",
    "EventSink",
    "InMemoryEventSink",
    "JsonlEventSink",
    "NullEventSink",
    "BufferedEventSink",
]
