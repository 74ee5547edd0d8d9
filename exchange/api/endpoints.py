"""API endpoints for the exchange."""

import asyncio
import functools
import os
from collections.abc import Callable
from typing import TypeVar

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from exchange.engine import Exchange, get_default_exchange
from exchange.models.api import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    ApprovalRequest,
    BalanceResponse,
    CreatePoolRequest,
    FaucetRequest,
    PoolListResponse,
    PoolResponse,
    QuoteResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    SwapRequest,
    SwapResponse,
)
from exchange.models.types import is_valid_address, normalize_address, short
from exchange.pools import Pool
from exchange.pools.types import SwapDirection

logger = structlog.get_logger()

router = APIRouter()

# Minting from nothing is a local/test convenience only
FAUCET_ENABLED = os.environ.get("EXCHANGE_ENABLE_FAUCET", "true").lower() in ("true", "1", "yes")

T = TypeVar("T")


def get_exchange() -> Exchange:
    """Dependency provider for the exchange instance.

    Override this in tests to inject a fresh exchange:
        app.dependency_overrides[get_exchange] = lambda: exchange
    """
    return get_default_exchange()


async def _run(func: Callable[..., T], *args: object) -> T:
    """Run a blocking engine call off the event loop.

    Pool operations and snapshots take the pool mutex, and ledger calls the
    ledger lock; running them in the executor keeps the event loop
    responsive while a swap holds either.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args))


def _require_address(*addresses: str) -> None:
    for address in addresses:
        if not is_valid_address(address):
            raise HTTPException(status_code=422, detail=f"Invalid address: {address}")


def _pool_response(pool: Pool) -> PoolResponse:
    return PoolResponse.from_state(pool.snapshot())


def _list_pools(exchange: Exchange) -> PoolListResponse:
    return PoolListResponse(pools=[_pool_response(pool) for pool in exchange.pools()])


def _quote(pool: Pool, side: SwapDirection, amount: int) -> int:
    if side is SwapDirection.BASE_TO_ASSET:
        return pool.get_asset_amount(amount)
    return pool.get_base_amount(amount)


@router.get("/pools")
async def list_pools(exchange: Exchange = Depends(get_exchange)) -> PoolListResponse:
    return await _run(_list_pools, exchange)


@router.post("/pools", status_code=201)
async def create_pool(
    request: CreatePoolRequest,
    exchange: Exchange = Depends(get_exchange),
) -> PoolResponse:
    pool = await _run(exchange.create_pool, request.asset)
    return await _run(_pool_response, pool)


@router.get("/pools/{asset}")
async def get_pool(asset: str, exchange: Exchange = Depends(get_exchange)) -> PoolResponse:
    return await _run(_pool_response, exchange.pool(asset))


@router.get("/pools/{asset}/quote")
async def quote(
    asset: str,
    side: SwapDirection,
    amount: int = Query(gt=0),
    exchange: Exchange = Depends(get_exchange),
) -> QuoteResponse:
    """Price a single-pool swap at current reserves without executing it."""
    amount_out = await _run(_quote, exchange.pool(asset), side, amount)
    return QuoteResponse(side=side, amount_in=amount, amount_out=amount_out)


@router.post("/pools/{asset}/liquidity")
async def add_liquidity(
    asset: str,
    request: AddLiquidityRequest,
    exchange: Exchange = Depends(get_exchange),
) -> AddLiquidityResponse:
    pool = exchange.pool(asset)
    minted = await _run(
        pool.add_liquidity,
        request.provider,
        int(request.base_amount),
        int(request.desired_asset_amount),
    )
    return AddLiquidityResponse(shares_minted=minted)


@router.post("/pools/{asset}/liquidity/remove")
async def remove_liquidity(
    asset: str,
    request: RemoveLiquidityRequest,
    exchange: Exchange = Depends(get_exchange),
) -> RemoveLiquidityResponse:
    pool = exchange.pool(asset)
    base_out, asset_out = await _run(
        pool.remove_liquidity, request.provider, int(request.share_amount)
    )
    return RemoveLiquidityResponse(base_amount=base_out, asset_amount=asset_out)


@router.post("/pools/{asset}/swap")
async def swap(
    asset: str,
    request: SwapRequest,
    exchange: Exchange = Depends(get_exchange),
) -> SwapResponse:
    """Execute a swap.

    - side=base_to_asset: sell base for the pool's asset
    - side=asset_to_base: sell the pool's asset for base
    - destination_asset: sell the pool's asset for another pool's asset
    """
    pool = exchange.pool(asset)
    amount_in = int(request.amount_in)
    min_out = int(request.min_amount_out)

    if request.destination_asset is not None:
        amount_out = await _run(
            pool.swap_asset_for_asset,
            request.caller,
            amount_in,
            min_out,
            request.destination_asset,
            request.recipient,
        )
    elif request.side is SwapDirection.BASE_TO_ASSET:
        amount_out = await _run(
            pool.swap_base_for_asset, request.caller, amount_in, min_out, request.recipient
        )
    else:
        amount_out = await _run(
            pool.swap_asset_for_base, request.caller, amount_in, min_out, request.recipient
        )

    return SwapResponse(
        amount_in=amount_in,
        amount_out=amount_out,
        destination_asset=request.destination_asset,
    )


@router.get("/accounts/{account}/balances/{asset}")
async def get_balance(
    account: str,
    asset: str,
    exchange: Exchange = Depends(get_exchange),
) -> BalanceResponse:
    _require_address(account, asset)
    balance = await _run(exchange.ledger.balance_of, account, asset)
    return BalanceResponse(
        account=normalize_address(account), asset=normalize_address(asset), balance=balance
    )


@router.post("/accounts/{account}/approvals", status_code=204)
async def approve(
    account: str,
    request: ApprovalRequest,
    exchange: Exchange = Depends(get_exchange),
) -> None:
    _require_address(account)
    approved = await _run(
        exchange.ledger.approve, account, request.spender, request.asset, int(request.amount)
    )
    if not approved:
        raise HTTPException(status_code=400, detail="Approval rejected by ledger")


@router.post("/faucet", status_code=204)
async def faucet(request: FaucetRequest, exchange: Exchange = Depends(get_exchange)) -> None:
    """Credit an account from nothing (in-memory ledger, local use only)."""
    mint = getattr(exchange.ledger, "mint", None)
    if not FAUCET_ENABLED or mint is None:
        raise HTTPException(status_code=404, detail="Faucet is disabled")
    await _run(mint, request.account, request.asset, int(request.amount))
    logger.info(
        "faucet_mint",
        account=short(request.account),
        asset=short(request.asset),
        amount=request.amount,
    )
