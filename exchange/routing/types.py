"""Type definitions for routing module."""

from __future__ import annotations

from dataclasses import dataclass

from exchange.pools.types import SwapLeg


@dataclass(frozen=True)
class RoutePlan:
    """Staged legs of a routed swap, in execution order."""

    legs: tuple[SwapLeg, ...]

    @property
    def amount_in(self) -> int:
        return self.legs[0].amount_in

    @property
    def amount_out(self) -> int:
        return self.legs[-1].amount_out

    @property
    def path(self) -> list[str]:
        """Pool addresses traversed."""
        return [leg.pool for leg in self.legs]


__all__ = ["RoutePlan"]
