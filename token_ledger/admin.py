"""
token_ledger.admin - owner-gated pause and blacklist switches.

All mutators are idempotent: setting a flag to the value it already has is a
successful no-op. None of them emit events; changes are logged instead.
"""

from __future__ import annotations

import logging

from .access import AccessControl
from .context import to_hex
from .state import TokenState

log = logging.getLogger(__name__)


class AdminOps:
    def __init__(self, access: AccessControl, state: TokenState) -> None:
        self._access = access
        self._state = state

    # ---- pause ----

    def pause(self, caller: bytes) -> None:
        self._access.ensure_owner(caller)
        self._state.paused.set(True)
        log.info("token paused by %s", to_hex(caller))

    def unpause(self, caller: bytes) -> None:
        self._access.ensure_owner(caller)
        self._state.paused.set(False)
        log.info("token unpaused by %s", to_hex(caller))

    def is_paused(self) -> bool:
        return self._access.is_paused()

    # ---- blacklist ----

    def blacklist(self, caller: bytes, account: bytes) -> None:
        self._access.ensure_owner(caller)
        self._state.blacklist.set(account, True)
        log.info("account %s blacklisted", to_hex(account))

    def unblacklist(self, caller: bytes, account: bytes) -> None:
        self._access.ensure_owner(caller)
        self._state.blacklist.set(account, False)
        log.info("account %s removed from blacklist", to_hex(account))

    def is_blacklisted(self, account: bytes) -> bool:
        return self._access.is_blacklisted(account)


__all__ = ["AdminOps"]
