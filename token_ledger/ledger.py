"""
token_ledger.ledger - balance storage with checked credit/debit.

``credit`` and ``debit`` are the only writers of the balance map. Both read the
current value, apply checked u128 arithmetic, store, and return the new
balance. Neither one checks guards; callers run AccessControl first.
"""

from __future__ import annotations

import logging

from .context import to_hex
from .errors import InsufficientBalance, Overflow
from .storage import U128Map
from .uint import checked_add, checked_sub

log = logging.getLogger(__name__)


class Ledger:
    def __init__(self, balances: U128Map) -> None:
        self._balances = balances

    def balance_of(self, account: bytes) -> int:
        return self._balances.get(account)

    def credit(self, account: bytes, amount: int) -> int:
        current = self._balances.get(account)
        try:
            new = checked_add(current, amount, error=Overflow)
        except Overflow as e:
            raise Overflow(
                "balance would exceed u128 range",
                data={"account": to_hex(account), "balance": current, "amount": amount},
            ) from e
        self._balances.set(account, new)
        log.debug("credit %s +%d -> %d", to_hex(account), amount, new)
        return new

    def debit(self, account: bytes, amount: int) -> int:
        current = self._balances.get(account)
        try:
            new = checked_sub(current, amount, error=InsufficientBalance)
        except InsufficientBalance as e:
            raise InsufficientBalance(
                data={"account": to_hex(account), "balance": current, "amount": amount},
            ) from e
        self._balances.set(account, new)
        log.debug("debit %s -%d -> %d", to_hex(account), amount, new)
        return new


__all__ = ["Ledger"]
