"""
token_ledger.transfer - balance moves, supply changes and approvals.

Every balance move funnels through :meth:`TransferEngine.move`:

    1. ensure_not_paused()
    2. ensure_not_blacklisted(from), ensure_not_blacklisted(to)
    3. Ledger.debit(from, amount)
    4. Ledger.credit(to, amount)
    5. emit Transfer{from, to, amount}

Step 4 may fail after step 3 has written. That is safe only because the host
reverts every staged write of a failed call (see :mod:`token_ledger.host`).

Inputs are assumed already validated (see :class:`token_ledger.token.Token`).
"""

from __future__ import annotations

import logging

from .access import AccessControl
from .allowances import AllowanceRegistry
from .context import to_hex
from .events import Approval, Burn, EventSink, Mint, Transfer
from .ledger import Ledger

log = logging.getLogger(__name__)


class TransferEngine:
    def __init__(
        self,
        access: AccessControl,
        ledger: Ledger,
        allowances: AllowanceRegistry,
        sink: EventSink,
    ) -> None:
        self._access = access
        self._ledger = ledger
        self._allowances = allowances
        self._sink = sink

    def move(self, sender: bytes, to: bytes, amount: int) -> None:
        self._access.ensure_not_paused()
        self._access.ensure_not_blacklisted(sender)
        self._access.ensure_not_blacklisted(to)

        self._ledger.debit(sender, amount)
        self._ledger.credit(to, amount)

        self._sink.emit(Transfer(sender=sender, to=to, amount=amount))
        log.debug("transfer %s -> %s amount=%d", to_hex(sender), to_hex(to), amount)

    def transfer(self, caller: bytes, to: bytes, amount: int) -> None:
        self.move(caller, to, amount)

    def transfer_from(self, caller: bytes, owner: bytes, to: bytes, amount: int) -> None:
        """`caller` spends `amount` of its allowance on `owner`, paying `to`."""
        self._access.ensure_not_paused()
        self._access.ensure_not_blacklisted(caller)
        self._access.ensure_not_blacklisted(owner)
        self._access.ensure_not_blacklisted(to)

        self._allowances.spend(owner, caller, amount)
        self.move(owner, to, amount)

    def mint(self, caller: bytes, to: bytes, amount: int) -> None:
        self._access.ensure_owner(caller)
        self._access.ensure_not_paused()
        self._access.ensure_not_blacklisted(to)

        self._ledger.credit(to, amount)
        self._sink.emit(Mint(to=to, amount=amount))
        log.debug("mint %s amount=%d", to_hex(to), amount)

    def burn(self, caller: bytes, amount: int) -> None:
        self._access.ensure_not_paused()
        self._access.ensure_not_blacklisted(caller)

        self._ledger.debit(caller, amount)
        self._sink.emit(Burn(sender=caller, amount=amount))
        log.debug("burn %s amount=%d", to_hex(caller), amount)

    def approve(self, caller: bytes, spender: bytes, amount: int) -> None:
        self._access.ensure_not_paused()
        self._access.ensure_not_blacklisted(caller)

        self._allowances.approve(caller, spender, amount)
        self._sink.emit(Approval(owner=caller, spender=spender, amount=amount))


__all__ = ["TransferEngine"]
