"""
Fungible token ledger.

One token instance: balances, delegated allowances, owner-only minting,
burning, a global pause switch, a per-account blacklist and one-to-many batch
transfers, all with checked u128 arithmetic and all-or-nothing calls.

Public surface:
- Token:      operation surface over a TokenState (caller passed explicitly)
- TokenHost:  execution environment (atomic per-call commit, CallResult)
- errors:     LedgerError hierarchy
- events:     Mint / Transfer / Approval / Burn records and sinks
- snapshot:   canonical CBOR state files
"""

from . import errors, events, snapshot
from .errors import LedgerError
from .host import CallResult, TokenHost
from .storage import MemoryBackend, StorageBackend
from .token import Token
from .version import __version__

__all__ = [
    "__version__",
    "errors",
    "events",
    "snapshot",
    "LedgerError",
    "CallResult",
    "TokenHost",
    "MemoryBackend",
    "StorageBackend",
    "Token",
]
