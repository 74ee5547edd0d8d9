"""Asset ledger interface and an in-memory implementation.

The exchange never holds balances itself: a pool's reserves are whatever
the ledger says the pool's address owns. Transfers follow the token
convention of returning False on rejection; pools turn a False into
LedgerTransferFailed and abort.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Protocol, runtime_checkable

import structlog

from exchange.models.types import normalize_address, short
from exchange.safe_int import S, Uint256Overflow

logger = structlog.get_logger()


@runtime_checkable
class AssetLedger(Protocol):
    """Balances per account per asset, with allowance-based pulls."""

    def balance_of(self, account: str, asset: str) -> int:
        """Current balance of `asset` held by `account`."""
        ...

    def transfer(self, sender: str, recipient: str, asset: str, amount: int) -> bool:
        """Move `amount` of `asset` from `sender` to `recipient`."""
        ...

    def transfer_from(
        self, spender: str, owner: str, recipient: str, asset: str, amount: int
    ) -> bool:
        """Move `amount` from `owner` to `recipient`, spending `spender`'s allowance."""
        ...

    def approve(self, owner: str, spender: str, asset: str, amount: int) -> bool:
        """Allow `spender` to pull up to `amount` of `asset` from `owner`."""
        ...

    def allowance(self, owner: str, spender: str, asset: str) -> int:
        """Remaining amount `spender` may pull from `owner`."""
        ...


class InMemoryLedger:
    """Dict-backed AssetLedger.

    All addresses are normalized to lowercase. A single lock serializes
    every read and write so that concurrent pools see consistent balances.
    """

    def __init__(self) -> None:
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._allowances: dict[tuple[str, str, str], int] = defaultdict(int)
        self._lock = threading.RLock()

    def balance_of(self, account: str, asset: str) -> int:
        key = (normalize_address(account), normalize_address(asset))
        with self._lock:
            return self._balances.get(key, 0)

    def mint(self, account: str, asset: str, amount: int) -> None:
        """Credit `amount` out of thin air, for seeding balances.

        Raises:
            Uint256Overflow: If the resulting balance does not fit in uint256
        """
        key = (normalize_address(account), normalize_address(asset))
        with self._lock:
            self._balances[key] = (S(self._balances[key]) + S(amount)).to_uint256()
        logger.debug("ledger_mint", account=short(key[0]), asset=short(key[1]), amount=amount)

    def transfer(self, sender: str, recipient: str, asset: str, amount: int) -> bool:
        with self._lock:
            return self._move(sender, recipient, asset, amount)

    def transfer_from(
        self, spender: str, owner: str, recipient: str, asset: str, amount: int
    ) -> bool:
        allowance_key = (
            normalize_address(owner),
            normalize_address(spender),
            normalize_address(asset),
        )
        with self._lock:
            allowed = self._allowances.get(allowance_key, 0)
            if amount > allowed:
                logger.debug(
                    "ledger_allowance_exceeded",
                    owner=short(allowance_key[0]),
                    spender=short(allowance_key[1]),
                    asset=short(allowance_key[2]),
                    amount=amount,
                    allowance=allowed,
                )
                return False
            if not self._move(owner, recipient, asset, amount):
                return False
            self._allowances[allowance_key] = allowed - amount
            return True

    def approve(self, owner: str, spender: str, asset: str, amount: int) -> bool:
        try:
            amount = S(amount).to_uint256()
        except Uint256Overflow:
            return False
        key = (normalize_address(owner), normalize_address(spender), normalize_address(asset))
        with self._lock:
            self._allowances[key] = amount
        return True

    def allowance(self, owner: str, spender: str, asset: str) -> int:
        key = (normalize_address(owner), normalize_address(spender), normalize_address(asset))
        with self._lock:
            return self._allowances.get(key, 0)

    def _move(self, sender: str, recipient: str, asset: str, amount: int) -> bool:
        if amount < 0:
            return False
        asset_norm = normalize_address(asset)
        sender_key = (normalize_address(sender), asset_norm)
        recipient_key = (normalize_address(recipient), asset_norm)

        available = self._balances.get(sender_key, 0)
        if amount > available:
            logger.debug(
                "ledger_insufficient_balance",
                account=short(sender_key[0]),
                asset=short(asset_norm),
                amount=amount,
                balance=available,
            )
            return False

        credited = S(self._balances.get(recipient_key, 0)) + S(amount)
        if not credited.is_uint256():
            return False

        self._balances[sender_key] = available - amount
        # Re-read after the debit so self-transfers stay balanced
        self._balances[recipient_key] = self._balances.get(recipient_key, 0) + amount
        return True
