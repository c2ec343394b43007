"""
token_ledger.journal - per-call write staging over a storage backend.

This module provides a deterministic, in-memory write journal layered over a
:class:`~token_ledger.storage.StorageBackend`. Writes go to a staging overlay;
reads consult the overlay first, then the base. ``commit()`` applies the
overlay to the base backend, ``revert()`` discards it.

The journal is itself a ``StorageBackend``, so the ledger state can be built
directly on top of it and stays unaware of staging. This is what gives the
host its all-or-nothing commit per call: a failed operation simply reverts
every write it staged, including the sender debit of a half-applied batch.

Intended usage
--------------
    j = Journal(backend)
    state = TokenState(j)
    ...                      # run one operation against `state`
    j.commit()               # overlay -> backend
    # or
    j.revert()               # drop everything staged since the last commit

Notes
-----
- Deletions are staged as explicit ``None`` markers so they shadow the base.
- ``commit()`` is all-or-nothing towards the base: if the backend fails on
  one key, keys already written are restored to their prior values and the
  error propagates. Either way the overlay is empty afterwards.
- The journal does not enforce ledger rules; callers validate before writing.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set, Tuple

from .storage import StorageBackend

log = logging.getLogger(__name__)

_Overlay = Dict[bytes, Optional[bytes]]


def _b(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like")
    return bytes(x)


class Journal:
    """
    A copy-on-write staging overlay.

    Parameters
    ----------
    base : StorageBackend
        The persisted backend. Only touched by ``commit()``.
    """

    def __init__(self, base: StorageBackend) -> None:
        self._base = base
        self._staged: _Overlay = {}

    @property
    def base(self) -> StorageBackend:
        return self._base

    # --------------------------------------------------------------------- #
    # Commit / revert
    # --------------------------------------------------------------------- #

    def commit(self) -> None:
        """Apply staged writes to the base backend, all or nothing."""
        staged, self._staged = self._staged, {}
        self._apply_to_base(staged)

    def revert(self) -> None:
        """Discard staged writes."""
        self._staged = {}

    # --------------------------------------------------------------------- #
    # StorageBackend API
    # --------------------------------------------------------------------- #

    def get(self, key: bytes) -> Optional[bytes]:
        k = _b(key, name="key")
        if k in self._staged:
            return self._staged[k]
        return self._base.get(k)

    def set(self, key: bytes, value: bytes) -> None:
        self._staged[_b(key, name="key")] = _b(value, name="value")

    def delete(self, key: bytes) -> None:
        self._staged[_b(key, name="key")] = None

    def exists(self, key: bytes) -> bool:
        return self.get(key) is not None

    # --------------------------------------------------------------------- #
    # Internal apply
    # --------------------------------------------------------------------- #

    def _apply_to_base(self, layer: _Overlay) -> None:
        applied: List[Tuple[bytes, Optional[bytes]]] = []
        try:
            for k, v in sorted(layer.items()):
                prior = self._base.get(k)
                if v is None:
                    self._base.delete(k)
                else:
                    self._base.set(k, v)
                applied.append((k, prior))
        except Exception:
            log.error("commit failed after %d of %d writes; restoring", len(applied), len(layer))
            for k, prior in reversed(applied):
                if prior is None:
                    self._base.delete(k)
                else:
                    self._base.set(k, prior)
            raise

    # --------------------------------------------------------------------- #
    # Introspection
    # --------------------------------------------------------------------- #

    def pending_keys(self) -> Set[bytes]:
        """Keys with staged writes."""
        return set(self._staged)


__all__ = ["Journal"]
