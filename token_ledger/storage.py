"""
token_ledger.storage - key/value backend and typed mapping views.

The ledger never assumes in-memory-only semantics. All persisted state goes
through a tiny :class:`StorageBackend` protocol over ``bytes -> bytes`` so the
host can swap in a real state DB; the default :class:`MemoryBackend` is for
local runs and tests.

On top of the raw backend sit typed views with a defined default for absent
keys:

- :class:`U128Map`  : key -> u128 (default 0), 16-byte big-endian values
- :class:`FlagMap`  : key -> bool (default False)
- :class:`BoolSlot` : single bool (default False)
- :class:`BytesSlot`: single bytes value (default None)

Key layout
----------
  balances:   BAL_PREFIX   || account
  allowances: ALLOW_PREFIX || u16be(len(owner)) || owner || spender
  blacklist:  BLACK_PREFIX || account
  paused:     K_PAUSED
  owner:      K_OWNER
"""

from __future__ import annotations

import threading
from typing import Dict, Final, Iterator, Optional, Protocol, Tuple, runtime_checkable

from .uint import decode_u128, encode_u128

BAL_PREFIX: Final[bytes] = b"tok:bal:"
ALLOW_PREFIX: Final[bytes] = b"tok:allow:"
BLACK_PREFIX: Final[bytes] = b"tok:black:"
K_PAUSED: Final[bytes] = b"tok:meta:paused"
K_OWNER: Final[bytes] = b"tok:meta:owner"

_TRUE: Final[bytes] = b"\x01"
_FALSE: Final[bytes] = b"\x00"


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal backend interface for ledger storage."""

    def get(self, key: bytes) -> Optional[bytes]: ...
    def set(self, key: bytes, value: bytes) -> None: ...
    def delete(self, key: bytes) -> None: ...
    def exists(self, key: bytes) -> bool: ...


class MemoryBackend:
    """Thread-safe in-memory backend for local runs and tests."""

    def __init__(self, initial: Optional[Dict[bytes, bytes]] = None) -> None:
        self._store: Dict[bytes, bytes] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._store.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        _check_key(key)
        _check_value(value)
        with self._lock:
            self._store[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        with self._lock:
            self._store.pop(key, None)

    def exists(self, key: bytes) -> bool:
        with self._lock:
            return key in self._store

    def items(self) -> Iterator[Tuple[bytes, bytes]]:
        """Snapshot of all entries in key order."""
        with self._lock:
            entries = sorted(self._store.items())
        return iter(entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


def _check_key(key: bytes) -> None:
    if not isinstance(key, (bytes, bytearray)):
        raise TypeError("storage key must be bytes")
    if len(key) == 0:
        raise ValueError("storage key must be non-empty")


def _check_value(value: bytes) -> None:
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError("storage value must be bytes")


# ------------------------------ Key helpers ------------------------------ #


def allow_subkey(owner: bytes, spender: bytes) -> bytes:
    # Length prefix keeps (owner, spender) unambiguous for variable-length ids.
    return len(owner).to_bytes(2, "big") + owner + spender


# ------------------------------ Typed views ------------------------------ #


class U128Map:
    """Mapping of prefixed keys to u128 values; absent reads as 0."""

    def __init__(self, backend: StorageBackend, prefix: bytes) -> None:
        self._backend = backend
        self._prefix = prefix

    def get(self, key: bytes) -> int:
        return decode_u128(self._backend.get(self._prefix + key))

    def set(self, key: bytes, value: int) -> None:
        self._backend.set(self._prefix + key, encode_u128(value))


class FlagMap:
    """Mapping of prefixed keys to booleans; absent reads as False."""

    def __init__(self, backend: StorageBackend, prefix: bytes) -> None:
        self._backend = backend
        self._prefix = prefix

    def get(self, key: bytes) -> bool:
        return self._backend.get(self._prefix + key) == _TRUE

    def set(self, key: bytes, flag: bool) -> None:
        self._backend.set(self._prefix + key, _TRUE if flag else _FALSE)


class BoolSlot:
    def __init__(self, backend: StorageBackend, key: bytes) -> None:
        self._backend = backend
        self._key = key

    def get(self) -> bool:
        return self._backend.get(self._key) == _TRUE

    def set(self, flag: bool) -> None:
        self._backend.set(self._key, _TRUE if flag else _FALSE)


class BytesSlot:
    def __init__(self, backend: StorageBackend, key: bytes) -> None:
        self._backend = backend
        self._key = key

    def get(self) -> Optional[bytes]:
        v = self._backend.get(self._key)
        return v if v else None

    def set(self, value: bytes) -> None:
        self._backend.set(self._key, bytes(value))


__all__ = [
    "BAL_PREFIX",
    "ALLOW_PREFIX",
    "BLACK_PREFIX",
    "K_PAUSED",
    "K_OWNER",
    "StorageBackend",
    "MemoryBackend",
    "allow_subkey",
    "U128Map",
    "FlagMap",
    "BoolSlot",
    "BytesSlot",
]
