"""Liquidity-share accounting for a single pool."""

from __future__ import annotations

from collections.abc import Iterator

from exchange.errors import InsufficientShares, InvalidAmount
from exchange.models.types import normalize_address
from exchange.transaction import Journal


class ShareBook:
    """Provider → share balance, with the running total.

    Mutations go through mint() and burn(), which keep
    sum(balances) == total_supply and record their own undo on the journal.
    """

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._total_supply = 0

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, provider: str) -> int:
        return self._balances.get(normalize_address(provider), 0)

    def holders(self) -> Iterator[tuple[str, int]]:
        """Providers with a non-zero balance."""
        return iter(list(self._balances.items()))

    def mint(self, provider: str, amount: int, journal: Journal) -> None:
        if amount < 0:
            raise InvalidAmount(f"Cannot mint negative shares: {amount}")
        provider = normalize_address(provider)
        self._credit(provider, amount)
        journal.record(f"mint {amount} shares", lambda: self._debit(provider, amount))

    def burn(self, provider: str, amount: int, journal: Journal) -> None:
        """Remove shares from a provider.

        Raises:
            InvalidAmount: If amount is not positive
            InsufficientShares: If the provider holds fewer than amount shares
        """
        if amount <= 0:
            raise InvalidAmount(f"Share amount must be positive: {amount}")
        provider = normalize_address(provider)
        held = self._balances.get(provider, 0)
        if amount > held:
            raise InsufficientShares(f"{provider} holds {held} shares, cannot burn {amount}")
        self._debit(provider, amount)
        journal.record(f"burn {amount} shares", lambda: self._credit(provider, amount))

    def _credit(self, provider: str, amount: int) -> None:
        if amount == 0:
            return
        self._balances[provider] = self._balances.get(provider, 0) + amount
        self._total_supply += amount

    def _debit(self, provider: str, amount: int) -> None:
        if amount == 0:
            return
        remaining = self._balances[provider] - amount
        if remaining:
            self._balances[provider] = remaining
        else:
            del self._balances[provider]
        self._total_supply -= amount
