"""
token_ledger.allowances - (owner, spender) -> remaining delegated amount.

``approve`` overwrites (re-approving replaces, never adds). ``spend`` is the
only decrement and fails with AllowanceExceeded instead of wrapping.
"""

from __future__ import annotations

from .context import to_hex
from .errors import AllowanceExceeded
from .storage import U128Map, allow_subkey
from .uint import checked_sub


class AllowanceRegistry:
    def __init__(self, allowances: U128Map) -> None:
        self._allowances = allowances

    def allowance(self, owner: bytes, spender: bytes) -> int:
        return self._allowances.get(allow_subkey(owner, spender))

    def approve(self, owner: bytes, spender: bytes, amount: int) -> None:
        self._allowances.set(allow_subkey(owner, spender), amount)

    def spend(self, owner: bytes, spender: bytes, amount: int) -> int:
        key = allow_subkey(owner, spender)
        current = self._allowances.get(key)
        try:
            remaining = checked_sub(current, amount, error=AllowanceExceeded)
        except AllowanceExceeded as e:
            raise AllowanceExceeded(
                data={
                    "owner": to_hex(owner),
                    "spender": to_hex(spender),
                    "allowance": current,
                    "amount": amount,
                },
            ) from e
        self._allowances.set(key, remaining)
        return remaining


__all__ = ["AllowanceRegistry"]
