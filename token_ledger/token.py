"""
token_ledger.token - the public operation surface of one token instance.

:class:`Token` wires the leaf components (AccessControl, Ledger,
AllowanceRegistry) into the composite ones (TransferEngine,
BatchTransferOrchestrator, AdminOps) over a single :class:`TokenState`, and
exposes every operation with an explicit ``caller`` (no ambient msg.sender).

Public interface
----------------
# views (no guards, no side effects)
balance_of(account) -> int
allowance(owner, spender) -> int
is_paused() -> bool
is_blacklisted(account) -> bool
owner() -> bytes | None

# mutations (explicit caller)
mint(caller, to, amount)
transfer(caller, to, amount)
burn(caller, amount)
approve(caller, spender, amount)
transfer_from(caller, owner, to, amount)
batch_transfer(caller, recipients, amounts) -> int
pause(caller) / unpause(caller)
blacklist(caller, account) / unblacklist(caller, account)

Inputs are validated before any guard runs. Mutations raise
:class:`~token_ledger.errors.LedgerError` subclasses and are *not* atomic on
their own: run them through :class:`token_ledger.host.TokenHost` to get
all-or-nothing commit.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from .access import AccessControl
from .admin import AdminOps
from .allowances import AllowanceRegistry
from .batch import BatchTransferOrchestrator
from .config import load_config
from .context import require_account
from .errors import ValidationError
from .events import EventSink, InMemoryEventSink
from .ledger import Ledger
from .state import TokenState
from .storage import MemoryBackend, StorageBackend
from .transfer import TransferEngine
from .uint import require_amount


class Token:
    def __init__(
        self,
        state: TokenState,
        sink: EventSink,
        *,
        account_size: Optional[int] = None,
    ) -> None:
        self.state = state
        self.sink = sink
        self.account_size = (
            load_config().address_bytes if account_size is None else int(account_size)
        )

        self.access = AccessControl(state)
        self.ledger = Ledger(state.balances)
        self.allowances = AllowanceRegistry(state.allowances)
        self.engine = TransferEngine(self.access, self.ledger, self.allowances, sink)
        self.batch = BatchTransferOrchestrator(self.access, self.ledger, sink)
        self.admin = AdminOps(self.access, state)

    @classmethod
    def deploy(
        cls,
        owner: Any,
        backend: Optional[StorageBackend] = None,
        sink: Optional[EventSink] = None,
        *,
        account_size: Optional[int] = None,
    ) -> "Token":
        """Initialize a fresh state owned by `owner` and return its Token."""
        state = TokenState(backend if backend is not None else MemoryBackend())
        token = cls(
            state,
            sink if sink is not None else InMemoryEventSink(),
            account_size=account_size,
        )
        state.initialize(token._account(owner, "owner"))
        return token

    # ------------------------------------------------------------------ #
    # Input validation
    # ------------------------------------------------------------------ #

    def _account(self, value: Any, name: str) -> bytes:
        return require_account(value, size=self.account_size, name=name)

    def _accounts(self, values: Sequence[Any], name: str) -> List[bytes]:
        if not isinstance(values, (list, tuple)):
            raise ValidationError(f"{name} must be a list", data={"field": name})
        return [self._account(v, f"{name}[{i}]") for i, v in enumerate(values)]

    def _amounts(self, values: Sequence[Any], name: str) -> List[int]:
        if not isinstance(values, (list, tuple)):
            raise ValidationError(f"{name} must be a list", data={"field": name})
        return [require_amount(v, name=f"{name}[{i}]") for i, v in enumerate(values)]

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def balance_of(self, account: Any) -> int:
        return self.ledger.balance_of(self._account(account, "account"))

    def allowance(self, owner: Any, spender: Any) -> int:
        return self.allowances.allowance(
            self._account(owner, "owner"), self._account(spender, "spender")
        )

    def is_paused(self) -> bool:
        return self.admin.is_paused()

    def is_blacklisted(self, account: Any) -> bool:
        return self.admin.is_blacklisted(self._account(account, "account"))

    def owner(self) -> Optional[bytes]:
        return self.access.owner()

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def mint(self, caller: Any, to: Any, amount: Any) -> None:
        self.engine.mint(
            self._account(caller, "caller"), self._account(to, "to"), require_amount(amount)
        )

    def transfer(self, caller: Any, to: Any, amount: Any) -> None:
        self.engine.transfer(
            self._account(caller, "caller"), self._account(to, "to"), require_amount(amount)
        )

    def burn(self, caller: Any, amount: Any) -> None:
        self.engine.burn(self._account(caller, "caller"), require_amount(amount))

    def approve(self, caller: Any, spender: Any, amount: Any) -> None:
        self.engine.approve(
            self._account(caller, "caller"),
            self._account(spender, "spender"),
            require_amount(amount),
        )

    def transfer_from(self, caller: Any, owner: Any, to: Any, amount: Any) -> None:
        self.engine.transfer_from(
            self._account(caller, "caller"),
            self._account(owner, "from"),
            self._account(to, "to"),
            require_amount(amount),
        )

    def batch_transfer(self, caller: Any, recipients: Sequence[Any], amounts: Sequence[Any]) -> int:
        sender = self._account(caller, "caller")
        return self.batch.batch_transfer(
            sender,
            self._accounts(recipients, "recipients"),
            self._amounts(amounts, "amounts"),
        )

    def pause(self, caller: Any) -> None:
        self.admin.pause(self._account(caller, "caller"))

    def unpause(self, caller: Any) -> None:
        self.admin.unpause(self._account(caller, "caller"))

    def blacklist(self, caller: Any, account: Any) -> None:
        self.admin.blacklist(self._account(caller, "caller"), self._account(account, "account"))

    def unblacklist(self, caller: Any, account: Any) -> None:
        self.admin.unblacklist(self._account(caller, "caller"), self._account(account, "account"))


__all__ = ["Token"]
