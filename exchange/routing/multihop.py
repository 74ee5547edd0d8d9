"""Asset-to-asset swaps routed through the base asset.

An asset-to-asset swap touches two pools: the source pool buys base asset
with the caller's asset, and the destination pool sells its asset for that
base. It runs as a two-phase transaction:

1. Stage: quote both legs against the pools' current reserves and check
   the caller's bound. Nothing has moved yet, so a failure here needs no
   undo.
2. Settle: apply both legs' transfers inside one journal. If any transfer
   fails, the journal reverses the ones already applied, in both pools.

Both pool mutexes are held for the whole operation, acquired in address
order so two opposite swaps between the same pools cannot deadlock.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from typing import TYPE_CHECKING

import structlog

from exchange.errors import InvalidDestination
from exchange.models.events import AssetToAssetPurchase
from exchange.models.types import normalize_account, short
from exchange.notifications import publish
from exchange.pools.types import SwapDirection
from exchange.routing.types import RoutePlan
from exchange.transaction import Journal, atomic

if TYPE_CHECKING:
    from exchange.pools.pool import Pool

logger = structlog.get_logger()


@contextmanager
def hold_pools(*pools: Pool) -> Iterator[None]:
    """Hold every pool's mutex, acquired in address order."""
    with ExitStack() as stack:
        for pool in sorted(set(pools), key=lambda p: p.address):
            stack.enter_context(pool.mutex)
        yield


class AssetToAssetSwap:
    """Two-pool swap of the source pool's asset for the destination's.

    Args:
        source: Pool of the asset being sold
        destination: Pool of the asset being bought
        caller: Account selling; must have approved the source pool
        amount_in: Source asset sold
        min_amount_out: Smallest acceptable destination-asset output
        recipient: Account receiving the output (default: caller)
    """

    def __init__(
        self,
        source: Pool,
        destination: Pool,
        caller: str,
        amount_in: int,
        min_amount_out: int,
        recipient: str | None = None,
    ) -> None:
        if source is destination or source.address == destination.address:
            raise InvalidDestination("Destination pool is the source pool")
        if source.ledger is not destination.ledger:
            raise InvalidDestination("Source and destination pools use different ledgers")
        self.source = source
        self.destination = destination
        self.caller = normalize_account(caller)
        self.recipient = normalize_account(recipient or caller)
        self.amount_in = amount_in
        self.min_amount_out = min_amount_out

    def stage(self) -> RoutePlan:
        """Quote both legs and check the bound, without moving anything.

        The base bought by the first leg is delivered to the destination
        pool, so the second leg is priced as a base deposit arriving there.

        Raises:
            InvalidReserves: If either pool lacks liquidity
            SlippageExceeded: If the final output is below min_amount_out
        """
        first = self.source.quote(
            SwapDirection.ASSET_TO_BASE,
            self.amount_in,
            payer=self.caller,
            recipient=self.destination.address,
        )
        second = self.destination.quote(
            SwapDirection.BASE_TO_ASSET,
            first.amount_out,
            payer=self.source.address,
            recipient=self.recipient,
        )
        second.require_min_output(self.min_amount_out)
        return RoutePlan(legs=(first, second))

    def settle(self, plan: RoutePlan, journal: Journal) -> None:
        """Apply a staged plan; each pool re-prices its leg before paying out."""
        first, second = plan.legs
        with hold_pools(self.source, self.destination):
            self.source._settle(first, journal)
            self.destination._settle(second, journal, input_delivered=True)

    def execute(self, journal: Journal | None = None) -> int:
        """Stage and settle the swap.

        Returns:
            Destination asset delivered to the recipient
        """
        with hold_pools(self.source, self.destination):
            with atomic("swap_asset_for_asset", journal) as active:
                plan = self.stage()
                self.settle(plan, active)

        logger.info(
            "asset_to_asset_swap_executed",
            source_pool=short(self.source.address),
            destination_pool=short(self.destination.address),
            caller=short(self.caller),
            recipient=short(self.recipient),
            amount_in=self.amount_in,
            base_routed=plan.legs[0].amount_out,
            amount_out=plan.amount_out,
        )
        publish(
            self.source.events,
            AssetToAssetPurchase(
                pool=self.source.address,
                buyer=self.caller,
                recipient=self.recipient,
                source_asset=self.source.asset,
                assets_sold=self.amount_in,
                destination_asset=self.destination.asset,
                assets_bought=plan.amount_out,
            ),
        )
        return plan.amount_out
