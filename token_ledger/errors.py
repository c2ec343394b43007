"""
token_ledger.errors - typed failures of the token ledger.

The ledger core communicates every failure through *typed exceptions*. The
hosting environment (see :mod:`token_ledger.host`) turns them into returned,
structured results, so a failing call is never an unrecoverable fault.

Hierarchy
---------
LedgerError (base)
 ├─ AuthorizationError        : non-owner called an owner-only operation
 ├─ StateError                : operation not allowed in the current state
 │   ├─ Paused
 │   └─ AlreadyInitialized
 ├─ ComplianceError           : an involved account is blacklisted
 ├─ LedgerArithmeticError     : checked u128 arithmetic failed (is-a ArithmeticError)
 │   ├─ Overflow
 │   ├─ InsufficientBalance
 │   └─ AllowanceExceeded
 └─ ValidationError           : malformed input
     ├─ LengthMismatch
     ├─ InvalidAmount
     ├─ InvalidAccount
     └─ UnknownMethod

This module has no imports from the rest of the package so it can be used from
the lowest layers without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class LedgerError(Exception):
    """
    Base ledger error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g. 'PAUSED', 'OVERFLOW').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "ledger error"
    code: str = "LEDGER_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for results and logs."""
        out: Dict[str, Any] = {
            "kind": type(self).__name__,
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            out["data"] = self.data
        return out


class AuthorizationError(LedgerError):
    def __init__(
        self, message: str = "caller is not the owner", *, data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code="UNAUTHORIZED", data=data)


# -------- state ---------------------------------------------------------------


class StateError(LedgerError):
    def __init__(
        self,
        message: str = "operation not allowed in current state",
        *,
        code: str = "STATE_ERROR",
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, data=data)


class Paused(StateError):
    def __init__(self, message: str = "token is paused", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="PAUSED", data=data)


class AlreadyInitialized(StateError):
    def __init__(
        self, message: str = "token state already initialized", *, data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, code="ALREADY_INITIALIZED", data=data)


class ComplianceError(LedgerError):
    def __init__(
        self, message: str = "account is blacklisted", *, data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code="BLACKLISTED", data=data)


# -------- arithmetic ----------------------------------------------------------


class LedgerArithmeticError(LedgerError, ArithmeticError):
    """
    Checked u128 arithmetic failure.

    Also an instance of the builtin ``ArithmeticError`` so generic numeric
    handlers still see it.
    """

    def __init__(
        self,
        message: str = "arithmetic error",
        *,
        code: str = "ARITHMETIC",
        data: Optional[Dict[str, Any]] = None,
    ):
        LedgerError.__init__(self, message=message, code=code, data=data)


class Overflow(LedgerArithmeticError):
    def __init__(self, message: str = "u128 overflow", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="OVERFLOW", data=data)


class InsufficientBalance(LedgerArithmeticError):
    def __init__(
        self, message: str = "insufficient balance", *, data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, code="INSUFFICIENT_BALANCE", data=data)


class AllowanceExceeded(LedgerArithmeticError):
    def __init__(
        self, message: str = "allowance exceeded", *, data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, code="ALLOWANCE_EXCEEDED", data=data)


# -------- validation ----------------------------------------------------------


class ValidationError(LedgerError):
    def __init__(
        self,
        message: str = "invalid input",
        *,
        code: str = "INVALID_INPUT",
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, data=data)


class LengthMismatch(ValidationError):
    def __init__(
        self, message: str = "mismatched input lengths", *, data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, code="LENGTH_MISMATCH", data=data)


class InvalidAmount(ValidationError):
    def __init__(self, message: str = "invalid amount", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INVALID_AMOUNT", data=data)


class InvalidAccount(ValidationError):
    def __init__(self, message: str = "invalid account", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INVALID_ACCOUNT", data=data)


class UnknownMethod(ValidationError):
    def __init__(self, message: str = "unknown method", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="UNKNOWN_METHOD", data=data)


# -------- helper utilities ----------------------------------------------------


def error_to_receipt_fields(err: LedgerError) -> Dict[str, Any]:
    """
    Map a LedgerError to result fields.

    Returns:
        {"status": "REVERT", "error": {kind, code, message, data?}}
    """
    return {"status": "REVERT", "error": err.to_dict()}


__all__ = [
    "LedgerError",
    "AuthorizationError",
    "StateError",
    "Paused",
    "AlreadyInitialized",
    "ComplianceError",
    "LedgerArithmeticError",
    "Overflow",
    "InsufficientBalance",
    "AllowanceExceeded",
    "ValidationError",
    "LengthMismatch",
    "InvalidAmount",
    "InvalidAccount",
    "UnknownMethod",
    "error_to_receipt_fields",
]
