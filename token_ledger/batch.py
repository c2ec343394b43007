"""
token_ledger.batch - one-to-many disbursement from a single sender.

Order of work for ``batch_transfer(sender, recipients, amounts)``:

    1. len(recipients) == len(amounts)        else LengthMismatch
    2. ensure_not_paused(), ensure_not_blacklisted(sender)
    3. total = checked sum of amounts         else Overflow
    4. one Ledger.debit(sender, total)        else InsufficientBalance
    5. per (recipient, amount), in input order:
         ensure_not_blacklisted(recipient)
         Ledger.credit(recipient, amount)
         emit Transfer{sender, recipient, amount}

A blacklisted recipient anywhere in the list fails the whole batch. The
orchestrator performs no rollback of its own: the sender debit from step 4 is
undone by the host's per-call revert when a later step fails.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .access import AccessControl
from .context import to_hex
from .errors import LengthMismatch
from .events import EventSink, Transfer
from .ledger import Ledger
from .uint import checked_sum

log = logging.getLogger(__name__)


class BatchTransferOrchestrator:
    def __init__(self, access: AccessControl, ledger: Ledger, sink: EventSink) -> None:
        self._access = access
        self._ledger = ledger
        self._sink = sink

    def batch_transfer(
        self, sender: bytes, recipients: Sequence[bytes], amounts: Sequence[int]
    ) -> int:
        """Returns the total debited from `sender`."""
        if len(recipients) != len(amounts):
            raise LengthMismatch(
                data={"recipients": len(recipients), "amounts": len(amounts)}
            )

        self._access.ensure_not_paused()
        self._access.ensure_not_blacklisted(sender)

        total = checked_sum(amounts)
        self._ledger.debit(sender, total)

        for recipient, amount in zip(recipients, amounts):
            self._access.ensure_not_blacklisted(recipient)
            self._ledger.credit(recipient, amount)
            self._sink.emit(Transfer(sender=sender, to=recipient, amount=amount))

        log.debug(
            "batch transfer from %s recipients=%d total=%d",
            to_hex(sender),
            len(recipients),
            total,
        )
        return total


__all__ = ["BatchTransferOrchestrator"]
