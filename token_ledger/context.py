"""
token_ledger.context - account identifiers and the per-call context.

Account identifiers are opaque, non-empty ``bytes``. Higher layers (CLI, host)
may hand us hex strings (with or without "0x"); these are normalized to bytes
here so that the ledger core only ever sees one representation.

Caller identity is never read from ambient state: the hosting environment
builds a :class:`CallContext` for each invocation and passes the caller
explicitly into every operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

from .errors import InvalidAccount

AccountLike = Union[bytes, bytearray, memoryview, str]


# ----------------------------- helpers ----------------------------- #


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: AccountLike) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise InvalidAccount(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise InvalidAccount(f"invalid hex string: {value!r}") from e
    raise InvalidAccount(f"cannot convert type {type(value).__name__} to an account")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def require_account(value: Any, *, size: int = 0, name: str = "account") -> bytes:
    """
    Validate and normalize an account identifier.

    ``size`` > 0 pins the exact byte length; 0 accepts any non-empty id.
    """
    acct = to_bytes(value)
    if not acct:
        raise InvalidAccount(f"{name} must be non-empty", data={"field": name})
    if size and len(acct) != size:
        raise InvalidAccount(
            f"{name} must be {size} bytes, got {len(acct)}",
            data={"field": name, "len": len(acct)},
        )
    return acct


# ----------------------------- models ------------------------------ #


@dataclass(frozen=True)
class CallContext:
    """
    Per-invocation environment handed from the host to the ledger.

    Fields
    ------
    caller: Acting account (bytes).
    method: Operation name being invoked.
    args:   Positional arguments as received.
    seq:    Host-assigned, strictly increasing call number.
    """
    caller: bytes
    method: str
    args: Tuple[Any, ...] = ()
    seq: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "caller", require_account(self.caller, name="caller"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seq": self.seq,
            "caller": to_hex(self.caller),
            "method": self.method,
        }


__all__ = [
    "AccountLike",
    "to_bytes",
    "to_hex",
    "require_account",
    "CallContext",
]
