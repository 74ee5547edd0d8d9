"""Pool value types shared by pools and routing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from exchange.errors import SlippageExceeded


class SwapDirection(str, Enum):
    """Which side of a pool is sold in."""

    BASE_TO_ASSET = "base_to_asset"
    ASSET_TO_BASE = "asset_to_base"


@dataclass(frozen=True)
class PoolState:
    """Point-in-time view of a pool."""

    address: str
    asset: str
    base_reserve: int
    asset_reserve: int
    total_shares: int

    @property
    def invariant(self) -> int:
        """Constant-product value base_reserve * asset_reserve."""
        return self.base_reserve * self.asset_reserve


@dataclass(frozen=True)
class SwapLeg:
    """A priced, not yet settled, swap against one pool.

    input_reserve and output_reserve are the pool reserves the price was
    computed from, i.e. before this leg's input is credited.
    """

    pool: str
    direction: SwapDirection
    payer: str
    recipient: str
    amount_in: int
    amount_out: int
    input_reserve: int
    output_reserve: int

    def require_min_output(self, min_amount_out: int) -> None:
        """Raises SlippageExceeded if this leg pays less than min_amount_out."""
        if self.amount_out < min_amount_out:
            raise SlippageExceeded(self.amount_out, min_amount_out)


__all__ = ["PoolState", "SwapDirection", "SwapLeg"]
