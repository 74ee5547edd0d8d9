"""Pydantic models for the HTTP API.

Amounts are uint256 decimal strings on the wire, as token APIs commonly
send them, and are converted to int at the endpoint boundary.
"""

from __future__ import annotations

from pydantic import BaseModel, model_validator

from exchange.models.types import Address, Uint256
from exchange.pools.types import PoolState, SwapDirection


class CreatePoolRequest(BaseModel):
    asset: Address


class PoolResponse(BaseModel):
    """Current state of a pool."""

    address: Address
    asset: Address
    base_reserve: Uint256
    asset_reserve: Uint256
    total_shares: Uint256

    @classmethod
    def from_state(cls, state: PoolState) -> PoolResponse:
        return cls(
            address=state.address,
            asset=state.asset,
            base_reserve=state.base_reserve,
            asset_reserve=state.asset_reserve,
            total_shares=state.total_shares,
        )


class PoolListResponse(BaseModel):
    pools: list[PoolResponse]


class QuoteResponse(BaseModel):
    side: SwapDirection
    amount_in: Uint256
    amount_out: Uint256


class AddLiquidityRequest(BaseModel):
    provider: Address
    base_amount: Uint256
    desired_asset_amount: Uint256


class AddLiquidityResponse(BaseModel):
    shares_minted: Uint256


class RemoveLiquidityRequest(BaseModel):
    provider: Address
    share_amount: Uint256


class RemoveLiquidityResponse(BaseModel):
    base_amount: Uint256
    asset_amount: Uint256


class SwapRequest(BaseModel):
    """A swap against one pool, or through it into another.

    Exactly one of `side` (single-pool swap) and `destination_asset`
    (asset-to-asset swap, selling the pool's asset) must be set.
    """

    caller: Address
    amount_in: Uint256
    min_amount_out: Uint256 = "0"
    side: SwapDirection | None = None
    destination_asset: Address | None = None
    recipient: Address | None = None

    @model_validator(mode="after")
    def _one_route(self) -> SwapRequest:
        if (self.side is None) == (self.destination_asset is None):
            raise ValueError("Exactly one of 'side' and 'destination_asset' must be given")
        return self


class SwapResponse(BaseModel):
    amount_in: Uint256
    amount_out: Uint256
    destination_asset: Address | None = None


class BalanceResponse(BaseModel):
    account: Address
    asset: Address
    balance: Uint256


class ApprovalRequest(BaseModel):
    spender: Address
    asset: Address
    amount: Uint256


class FaucetRequest(BaseModel):
    account: Address
    asset: Address
    amount: Uint256


class ErrorResponse(BaseModel):
    error: str
    detail: str
