# -*- coding: utf-8 -*-
"""
token_ledger.uint
=================

Checked unsigned-integer helpers for the U128 amount domain.

Every balance and allowance in the ledger lives in the closed interval
``[0, U128_MAX]``. Arithmetic never wraps and never goes through floats:

- ``checked_add`` raises the supplied error (default :class:`Overflow`) when
  the sum leaves the domain.
- ``checked_sub`` raises the supplied error (default
  :class:`InsufficientBalance`) when the subtrahend exceeds the minuend.
- ``checked_sum`` accumulates left to right and fails on the first partial
  sum that overflows.

The error class is a parameter so each component can surface the failure kind
that matches its own semantics (e.g. ``AllowanceExceeded`` for allowances).
"""

from __future__ import annotations

from typing import Final, Iterable, Type

from .errors import InsufficientBalance, InvalidAmount, LedgerArithmeticError, Overflow

U128_BITS: Final[int] = 128
U128_MAX: Final[int] = (1 << U128_BITS) - 1
U128_BYTES: Final[int] = U128_BITS // 8


def is_u128(x: object) -> bool:
    # bool is a subclass of int; amounts must be real ints.
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U128_MAX


def require_amount(x: object, *, name: str = "amount") -> int:
    """Return ``x`` as int or raise :class:`InvalidAmount`."""
    if not is_u128(x):
        raise InvalidAmount(
            f"{name} must be an int in [0, 2**128 - 1]",
            data={"field": name, "value": repr(x)},
        )
    return int(x)  # type: ignore[arg-type]


def checked_add(
    x: int, y: int, *, error: Type[LedgerArithmeticError] = Overflow
) -> int:
    s = x + y
    if s > U128_MAX:
        raise error("u128 addition overflow", data={"lhs": x, "rhs": y})
    return s


def checked_sub(
    x: int, y: int, *, error: Type[LedgerArithmeticError] = InsufficientBalance
) -> int:
    if y > x:
        raise error("u128 subtraction underflow", data={"available": x, "required": y})
    return x - y


def checked_sum(
    values: Iterable[int], *, error: Type[LedgerArithmeticError] = Overflow
) -> int:
    total = 0
    for v in values:
        total = checked_add(total, v, error=error)
    return total


def encode_u128(n: int) -> bytes:
    """Fixed-width 16-byte big-endian encoding used for storage values."""
    return require_amount(n).to_bytes(U128_BYTES, "big")


def decode_u128(raw: bytes | None) -> int:
    if not raw:
        return 0
    return int.from_bytes(raw, "big")


__all__ = [
    "U128_BITS",
    "U128_MAX",
    "U128_BYTES",
    "is_u128",
    "require_amount",
    "checked_add",
    "checked_sub",
    "checked_sum",
    "encode_u128",
    "decode_u128",
]
