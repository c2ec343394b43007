"""
token_ledger.access - the three guard predicates.

Each guard is a pure read of current state against an explicitly supplied
identity. Guards raise on failure and return ``None`` otherwise; they are
composed (called one after another) by every mutating operation and always run
before that operation's first write.

- ``ensure_owner(caller)``          -> AuthorizationError
- ``ensure_not_paused()``           -> StateError (Paused)
- ``ensure_not_blacklisted(acct)``  -> ComplianceError
"""

from __future__ import annotations

from .context import to_hex
from .errors import AuthorizationError, ComplianceError, Paused
from .state import TokenState


class AccessControl:
    def __init__(self, state: TokenState) -> None:
        self._state = state

    def owner(self) -> bytes | None:
        return self._state.owner.get()

    def is_paused(self) -> bool:
        return self._state.paused.get()

    def is_blacklisted(self, account: bytes) -> bool:
        return self._state.blacklist.get(account)

    def ensure_owner(self, caller: bytes) -> None:
        if caller != self.owner():
            raise AuthorizationError(data={"caller": to_hex(caller)})

    def ensure_not_paused(self) -> None:
        if self.is_paused():
            raise Paused()

    def ensure_not_blacklisted(self, account: bytes) -> None:
        if self.is_blacklisted(account):
            raise ComplianceError(data={"account": to_hex(account)})


__all__ = ["AccessControl"]
