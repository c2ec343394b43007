"""
token_ledger.state - the persisted layout of one token instance.

Three maps and two scalar slots over a single :class:`StorageBackend`:

    balances    account          -> u128
    allowances  (owner, spender) -> u128
    blacklist   account          -> bool
    paused      bool
    owner       account

Nothing else is stored. Components receive the typed views they own and never
write another component's keys.
"""

from __future__ import annotations

import logging

from .errors import AlreadyInitialized
from .storage import (ALLOW_PREFIX, BAL_PREFIX, BLACK_PREFIX, K_OWNER, K_PAUSED,
                      BoolSlot, BytesSlot, FlagMap, StorageBackend, U128Map)

log = logging.getLogger(__name__)


class TokenState:
    def __init__(self, backend: StorageBackend) -> None:
        self.backend = backend
        self.balances = U128Map(backend, BAL_PREFIX)
        self.allowances = U128Map(backend, ALLOW_PREFIX)
        self.blacklist = FlagMap(backend, BLACK_PREFIX)
        self.paused = BoolSlot(backend, K_PAUSED)
        self.owner = BytesSlot(backend, K_OWNER)

    def is_initialized(self) -> bool:
        return self.owner.get() is not None

    def initialize(self, owner: bytes) -> None:
        """One-time setup: fix the owner and clear the paused flag."""
        if self.is_initialized():
            raise AlreadyInitialized(data={"owner": "0x" + (self.owner.get() or b"").hex()})
        self.owner.set(owner)
        self.paused.set(False)
        log.info("token state initialized owner=0x%s", owner.hex())


__all__ = ["TokenState"]
