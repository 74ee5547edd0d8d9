"""Constant-product pool for one asset paired with the base asset.

Reserves are never stored: they are the pool address's balances on the
asset ledger, read at call time. The pool itself owns only its share book.

Every public operation runs under the pool mutex and inside a transaction
journal, so it either applies all of its ledger transfers and share
changes or none of them. Events are published after the journal commits.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import structlog

from exchange.config import DEFAULT_CONFIG, ExchangeConfig
from exchange.constants import BASE_ASSET
from exchange.errors import (
    InsufficientContribution,
    InsufficientShares,
    InvalidAmount,
    InvalidAssetAddress,
    InvalidDestination,
    InvalidReserves,
)
from exchange.ledger import AssetLedger
from exchange.models.events import AssetPurchase, BasePurchase, Divestment, Investment
from exchange.models.types import (
    is_valid_address,
    is_zero_address,
    normalize_account,
    normalize_address,
    short,
)
from exchange.notifications import EventSink, publish
from exchange.pools.shares import ShareBook
from exchange.pools.types import PoolState, SwapDirection, SwapLeg
from exchange.pricing import get_output_amount, proportional_amount
from exchange.safe_int import S
from exchange.transaction import Journal, atomic

if TYPE_CHECKING:
    from exchange.pools.registry import PoolRegistry

logger = structlog.get_logger()


class Pool:
    """Liquidity pool pairing `asset` with the base asset.

    Args:
        address: The pool's own account on the ledger
        asset: The paired asset
        ledger: Ledger holding the pool's reserves
        registry: Registry used to find destination pools for
            asset-to-asset swaps (None disables them)
        events: Sink for committed-operation notifications
        config: Fee policy
    """

    def __init__(
        self,
        address: str,
        asset: str,
        ledger: AssetLedger,
        *,
        registry: PoolRegistry | None = None,
        events: EventSink | None = None,
        config: ExchangeConfig = DEFAULT_CONFIG,
    ) -> None:
        if not is_valid_address(asset) or is_zero_address(asset):
            raise InvalidAssetAddress(f"Invalid pool asset: {asset!r}")
        self.address = normalize_address(address, validate=True)
        self.asset = normalize_address(asset)
        self.ledger = ledger
        self.events = events
        self.config = config
        self._registry = registry
        self._shares = ShareBook()
        # Serializes calls on this pool; re-entrant so routing can hold it
        # across both legs of an asset-to-asset swap.
        self.mutex = threading.RLock()

    def __repr__(self) -> str:
        return f"Pool(address={self.address!r}, asset={self.asset!r})"

    @property
    def registry(self) -> PoolRegistry | None:
        return self._registry

    def attach_registry(self, registry: PoolRegistry) -> None:
        """Bind this pool to the registry that lists it.

        Raises:
            InvalidAssetAddress: If the pool is already bound to another registry
        """
        if self._registry is not None and self._registry is not registry:
            raise InvalidAssetAddress(f"{self!r} already belongs to another registry")
        self._registry = registry

    # --- Reserves and shares ---

    def get_reserve(self) -> int:
        """Paired-asset balance of the pool, read live from the ledger."""
        return self.ledger.balance_of(self.address, self.asset)

    def get_base_reserve(self) -> int:
        """Base-asset balance of the pool, read live from the ledger."""
        return self.ledger.balance_of(self.address, BASE_ASSET)

    @property
    def total_shares(self) -> int:
        return self._shares.total_supply

    def share_balance_of(self, provider: str) -> int:
        return self._shares.balance_of(provider)

    def shares_by_provider(self) -> dict[str, int]:
        """Copy of every non-zero share balance."""
        return dict(self._shares.holders())

    def snapshot(self) -> PoolState:
        with self.mutex:
            return PoolState(
                address=self.address,
                asset=self.asset,
                base_reserve=self.get_base_reserve(),
                asset_reserve=self.get_reserve(),
                total_shares=self.total_shares,
            )

    # --- Pricing ---

    def get_output_amount(self, input_amount: int, input_reserve: int, output_reserve: int) -> int:
        """Price a trade with this pool's fee policy."""
        return get_output_amount(
            input_amount,
            input_reserve,
            output_reserve,
            fee_multiplier=self.config.fee_multiplier,
            fee_denominator=self.config.fee_denominator,
        )

    def get_asset_amount(self, base_sold: int) -> int:
        """Paired-asset output for selling `base_sold` at current reserves."""
        _require_positive(base_sold=base_sold)
        return self.get_output_amount(base_sold, self.get_base_reserve(), self.get_reserve())

    def get_base_amount(self, asset_sold: int) -> int:
        """Base-asset output for selling `asset_sold` at current reserves."""
        _require_positive(asset_sold=asset_sold)
        return self.get_output_amount(asset_sold, self.get_reserve(), self.get_base_reserve())

    def quote(
        self,
        direction: SwapDirection,
        amount_in: int,
        *,
        payer: str,
        recipient: str,
        incoming_base: int = 0,
    ) -> SwapLeg:
        """Price one swap leg without touching any state.

        Args:
            direction: Side sold into the pool
            amount_in: Amount sold
            payer: Account the input comes from
            recipient: Account the output goes to
            incoming_base: Base amount already credited to the pool for this
                call; it is subtracted so the input is not priced against
                itself

        Raises:
            InvalidReserves: If either reserve is empty
        """
        base_reserve = (S(self.get_base_reserve()) - S(incoming_base)).value
        asset_reserve = self.get_reserve()
        if direction is SwapDirection.BASE_TO_ASSET:
            input_reserve, output_reserve = base_reserve, asset_reserve
        else:
            input_reserve, output_reserve = asset_reserve, base_reserve

        return SwapLeg(
            pool=self.address,
            direction=direction,
            payer=normalize_address(payer),
            recipient=normalize_address(recipient),
            amount_in=amount_in,
            amount_out=self.get_output_amount(amount_in, input_reserve, output_reserve),
            input_reserve=input_reserve,
            output_reserve=output_reserve,
        )

    def _settle(self, leg: SwapLeg, journal: Journal, *, input_delivered: bool = False) -> None:
        """Apply a leg this pool quoted, re-pricing it against current reserves.

        Args:
            leg: Leg quoted by this pool
            journal: Journal recording the compensating transfers
            input_delivered: True when the base input already sits in the
                pool (attached base, or base forwarded by a sibling pool)

        Raises:
            InvalidReserves: If the leg no longer matches a fresh quote, or
                settling it would leave outstanding shares unbacked
        """
        if leg.pool != self.address:
            raise InvalidReserves(f"Leg for {leg.pool} cannot settle on {self.address}")
        if input_delivered and leg.direction is not SwapDirection.BASE_TO_ASSET:
            raise InvalidReserves("Only base input can be delivered ahead of settlement")
        _require_positive(amount_in=leg.amount_in)

        with self.mutex:
            fresh = self.quote(
                leg.direction,
                leg.amount_in,
                payer=leg.payer,
                recipient=leg.recipient,
                incoming_base=leg.amount_in if input_delivered else 0,
            )
            if fresh != leg:
                raise InvalidReserves(f"Stale or altered leg on {self!r}: {leg}")

            if leg.direction is SwapDirection.BASE_TO_ASSET:
                if not input_delivered:
                    journal.transfer(
                        self.ledger, leg.payer, self.address, BASE_ASSET, leg.amount_in
                    )
                journal.transfer(
                    self.ledger, self.address, leg.recipient, self.asset, leg.amount_out
                )
            else:
                journal.transfer_from(
                    self.ledger, self.address, leg.payer, self.address, self.asset, leg.amount_in
                )
                journal.transfer(
                    self.ledger, self.address, leg.recipient, BASE_ASSET, leg.amount_out
                )
            self._check_reserves()

    # --- Liquidity ---

    def add_liquidity(self, provider: str, base_amount: int, desired_asset_amount: int) -> int:
        """Deposit base and paired asset in exchange for shares.

        The first deposit into an empty pool sets the exchange rate and mints
        one share per base unit. Later deposits must bring paired asset in
        proportion to the current reserves; only the proportional amount is
        pulled, however much was offered.

        Args:
            provider: Depositing account; must have approved the pool for
                the paired asset
            base_amount: Base asset attached to the deposit
            desired_asset_amount: Most paired asset the provider will deposit

        Returns:
            Shares minted

        Raises:
            InvalidAmount: If an amount is negative
            InsufficientContribution: If an amount is zero, or the offered
                paired asset is below the proportional requirement
            LedgerTransferFailed: If the ledger rejects a transfer
        """
        _require_non_negative(base_amount=base_amount, desired_asset_amount=desired_asset_amount)
        if base_amount == 0 or desired_asset_amount == 0:
            raise InsufficientContribution(
                f"Zero-amount deposit: base={base_amount}, asset={desired_asset_amount}"
            )
        provider = normalize_account(provider)

        with self.mutex, atomic("add_liquidity") as journal:
            # Base arrives with the call, before any pricing
            journal.transfer(self.ledger, provider, self.address, BASE_ASSET, base_amount)

            asset_reserve = self.get_reserve()
            total_shares = self._shares.total_supply
            if asset_reserve == 0 or total_shares == 0:
                asset_amount = desired_asset_amount
                minted = base_amount
            else:
                base_reserve = self._base_reserve_before(base_amount)
                asset_amount = proportional_amount(base_amount, asset_reserve, base_reserve)
                if desired_asset_amount < asset_amount:
                    raise InsufficientContribution(
                        f"Deposit of {base_amount} base requires {asset_amount} asset, "
                        f"offered {desired_asset_amount}"
                    )
                minted = proportional_amount(base_amount, total_shares, base_reserve)
                if minted == 0:
                    raise InsufficientContribution(
                        f"Deposit of {base_amount} base is too small to mint a share"
                    )

            journal.transfer_from(
                self.ledger, self.address, provider, self.address, self.asset, asset_amount
            )
            self._shares.mint(provider, minted, journal)
            self._check_reserves()

        logger.info(
            "liquidity_added",
            pool=short(self.address),
            provider=short(provider),
            base_amount=base_amount,
            asset_amount=asset_amount,
            shares_minted=minted,
            total_shares=self.total_shares,
        )
        publish(self.events, Investment(self.address, provider, minted, base_amount, asset_amount))
        return minted

    def remove_liquidity(self, provider: str, share_amount: int) -> tuple[int, int]:
        """Burn shares and pay out the matching fraction of both reserves.

        Returns:
            (base_out, asset_out)

        Raises:
            InvalidAmount: If share_amount is not positive
            InsufficientShares: If the provider holds fewer shares
            LedgerTransferFailed: If the ledger rejects a payout
        """
        _require_positive(share_amount=share_amount)
        provider = normalize_account(provider)

        with self.mutex, atomic("remove_liquidity") as journal:
            held = self._shares.balance_of(provider)
            if share_amount > held:
                raise InsufficientShares(f"{provider} holds {held} shares, requested {share_amount}")

            # Proportions come from the supply before the burn
            total_shares = self._shares.total_supply
            base_out = proportional_amount(self.get_base_reserve(), share_amount, total_shares)
            asset_out = proportional_amount(self.get_reserve(), share_amount, total_shares)

            self._shares.burn(provider, share_amount, journal)
            journal.transfer(self.ledger, self.address, provider, BASE_ASSET, base_out)
            journal.transfer(self.ledger, self.address, provider, self.asset, asset_out)
            self._check_reserves()

        logger.info(
            "liquidity_removed",
            pool=short(self.address),
            provider=short(provider),
            shares_burned=share_amount,
            base_out=base_out,
            asset_out=asset_out,
            total_shares=self.total_shares,
        )
        publish(self.events, Divestment(self.address, provider, share_amount, base_out, asset_out))
        return base_out, asset_out

    # --- Swaps ---

    def swap_base_for_asset(
        self,
        caller: str,
        base_amount: int,
        min_asset_out: int,
        recipient: str | None = None,
    ) -> int:
        """Sell base asset for the paired asset.

        Args:
            caller: Account paying the base asset
            base_amount: Base asset attached to the call
            min_asset_out: Smallest acceptable output
            recipient: Account credited with the output (default: caller)

        Returns:
            Paired asset bought

        Raises:
            SlippageExceeded: If the output is below min_asset_out
        """
        _require_positive(base_amount=base_amount)
        _require_non_negative(min_asset_out=min_asset_out)
        caller = normalize_account(caller)
        recipient = normalize_account(recipient or caller)

        with self.mutex, atomic("swap_base_for_asset") as journal:
            journal.transfer(self.ledger, caller, self.address, BASE_ASSET, base_amount)
            leg = self.quote(
                SwapDirection.BASE_TO_ASSET,
                base_amount,
                payer=caller,
                recipient=recipient,
                incoming_base=base_amount,
            )
            leg.require_min_output(min_asset_out)
            self._settle(leg, journal, input_delivered=True)

        self._log_swap(leg)
        publish(
            self.events, AssetPurchase(self.address, caller, recipient, base_amount, leg.amount_out)
        )
        return leg.amount_out

    def swap_asset_for_base(
        self,
        caller: str,
        asset_amount: int,
        min_base_out: int,
        recipient: str | None = None,
    ) -> int:
        """Sell the paired asset for base asset.

        The caller must have approved the pool for at least `asset_amount`.

        Returns:
            Base asset bought

        Raises:
            SlippageExceeded: If the output is below min_base_out
        """
        _require_positive(asset_amount=asset_amount)
        _require_non_negative(min_base_out=min_base_out)
        caller = normalize_account(caller)
        recipient = normalize_account(recipient or caller)

        with self.mutex, atomic("swap_asset_for_base") as journal:
            leg = self.quote(
                SwapDirection.ASSET_TO_BASE, asset_amount, payer=caller, recipient=recipient
            )
            leg.require_min_output(min_base_out)
            self._settle(leg, journal)

        self._log_swap(leg)
        publish(
            self.events, BasePurchase(self.address, caller, recipient, asset_amount, leg.amount_out)
        )
        return leg.amount_out

    def swap_asset_for_asset(
        self,
        caller: str,
        asset_amount: int,
        min_output_amount: int,
        destination_asset: str,
        recipient: str | None = None,
    ) -> int:
        """Sell this pool's asset for another pool's asset, via the base asset.

        Args:
            caller: Account paying this pool's asset
            asset_amount: Amount of this pool's asset sold
            min_output_amount: Smallest acceptable output, in destination asset
            destination_asset: Asset bought; must have its own pool
            recipient: Account credited with the output (default: caller)

        Returns:
            Destination asset bought

        Raises:
            InvalidDestination: If no other pool trades destination_asset
            SlippageExceeded: If the output is below min_output_amount
        """
        from exchange.routing.multihop import AssetToAssetSwap

        _require_positive(asset_amount=asset_amount)
        _require_non_negative(min_output_amount=min_output_amount)

        destination = self._resolve_destination(destination_asset)
        swap = AssetToAssetSwap(
            source=self,
            destination=destination,
            caller=caller,
            amount_in=asset_amount,
            min_amount_out=min_output_amount,
            recipient=recipient,
        )
        return swap.execute()

    # --- Internals ---

    def _resolve_destination(self, destination_asset: str) -> Pool:
        if self._registry is None:
            raise InvalidDestination(f"{self!r} is not registered; cannot route to other pools")
        if not is_valid_address(destination_asset) or is_zero_address(destination_asset):
            raise InvalidDestination(f"Invalid destination asset: {destination_asset!r}")
        destination = self._registry.resolve(destination_asset)
        if destination is None:
            raise InvalidDestination(f"No pool for destination asset {destination_asset}")
        if destination is self:
            raise InvalidDestination("Destination pool is the source pool")
        return destination

    def _base_reserve_before(self, incoming_base: int) -> int:
        """Base reserve as it was before `incoming_base` was credited."""
        return (S(self.get_base_reserve()) - S(incoming_base)).value

    def _check_reserves(self) -> None:
        """Outstanding shares must always be backed by both reserves."""
        if self._shares.total_supply > 0 and (
            self.get_base_reserve() == 0 or self.get_reserve() == 0
        ):
            raise InvalidReserves(
                f"{self!r} has {self._shares.total_supply} shares but an empty reserve"
            )

    def _log_swap(self, leg: SwapLeg) -> None:
        logger.info(
            "swap_executed",
            pool=short(self.address),
            direction=leg.direction.value,
            payer=short(leg.payer),
            recipient=short(leg.recipient),
            amount_in=leg.amount_in,
            amount_out=leg.amount_out,
        )


def _require_positive(**amounts: int) -> None:
    for name, amount in amounts.items():
        if amount <= 0:
            raise InvalidAmount(f"{name} must be positive: {amount}")


def _require_non_negative(**amounts: int) -> None:
    for name, amount in amounts.items():
        if amount < 0:
            raise InvalidAmount(f"{name} must be non-negative: {amount}")
