"""All-or-nothing execution for pool operations.

A Journal records, for every state change it applies, the action that
undoes it. `atomic()` runs a block against a fresh journal: if the block
raises, recorded undo actions run newest-first and the original exception
propagates; otherwise the journal is discarded.

Ledger transfers are compensated by the reverse transfer. Allowance spent
by a compensated `transfer_from` is not re-granted: allowances are the
owner's authorization, not a balance.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import structlog

from exchange.errors import LedgerTransferFailed
from exchange.ledger import AssetLedger
from exchange.models.types import short

logger = structlog.get_logger()


@dataclass(frozen=True)
class _UndoEntry:
    description: str
    undo: Callable[[], None]


class Journal:
    """Ordered log of compensating actions for one operation."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        self._entries: list[_UndoEntry] = []
        self._closed = False

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, description: str, undo: Callable[[], None]) -> None:
        if self._closed:
            raise RuntimeError(f"Journal for {self.operation} is already closed")
        self._entries.append(_UndoEntry(description, undo))

    def transfer(
        self, ledger: AssetLedger, sender: str, recipient: str, asset: str, amount: int
    ) -> None:
        """Transfer on the ledger and record the reverse transfer.

        Raises:
            LedgerTransferFailed: If the ledger rejects the transfer
        """
        if not ledger.transfer(sender, recipient, asset, amount):
            raise LedgerTransferFailed(
                f"transfer of {amount} {asset} from {sender} to {recipient} rejected"
            )
        self.record(
            f"transfer {amount} {short(asset)} {short(sender)}->{short(recipient)}",
            lambda: _reverse(ledger, recipient, sender, asset, amount),
        )

    def transfer_from(
        self,
        ledger: AssetLedger,
        spender: str,
        owner: str,
        recipient: str,
        asset: str,
        amount: int,
    ) -> None:
        """Pull from `owner` on the ledger and record the refund.

        Raises:
            LedgerTransferFailed: If the ledger rejects the pull
        """
        if not ledger.transfer_from(spender, owner, recipient, asset, amount):
            raise LedgerTransferFailed(
                f"transfer_from of {amount} {asset} from {owner} by {spender} rejected"
            )
        self.record(
            f"transfer_from {amount} {short(asset)} {short(owner)}->{short(recipient)}",
            lambda: _reverse(ledger, recipient, owner, asset, amount),
        )

    def commit(self) -> None:
        self._entries.clear()
        self._closed = True

    def rollback(self) -> None:
        """Run every undo action, newest first.

        A failing undo is logged and the remaining ones still run.
        """
        failures = 0
        for entry in reversed(self._entries):
            try:
                entry.undo()
            except Exception:
                failures += 1
                logger.exception(
                    "journal_undo_failed", operation=self.operation, step=entry.description
                )
        logger.info(
            "journal_rolled_back",
            operation=self.operation,
            steps=len(self._entries),
            failures=failures,
        )
        self._entries.clear()
        self._closed = True


def _reverse(ledger: AssetLedger, sender: str, recipient: str, asset: str, amount: int) -> None:
    if not ledger.transfer(sender, recipient, asset, amount):
        raise LedgerTransferFailed(
            f"compensating transfer of {amount} {asset} from {sender} to {recipient} rejected"
        )


@contextmanager
def atomic(operation: str, journal: Journal | None = None) -> Iterator[Journal]:
    """Run a block all-or-nothing.

    Passing an existing journal joins it: the outer block owns commit and
    rollback, so nested steps of a multi-pool operation roll back together.
    """
    if journal is not None:
        yield journal
        return

    journal = Journal(operation)
    try:
        yield journal
    except BaseException:
        journal.rollback()
        raise
    journal.commit()
