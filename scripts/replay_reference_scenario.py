#!/usr/bin/env python3
"""Replay the reference exchange scenarios on an in-memory engine.

Usage:
    # All scenarios, human-readable
    python scripts/replay_reference_scenario.py

    # One scenario, as JSON, with engine logs
    python scripts/replay_reference_scenario.py --scenario asset-to-asset --json --verbose
"""

import argparse
import json
import logging
import sys
from collections.abc import Callable
from decimal import Decimal
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from exchange import Exchange, ExchangeConfig  # noqa: E402
from exchange.constants import BASE_ASSET  # noqa: E402
from exchange.pools import Pool  # noqa: E402

logger = structlog.get_logger()

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b0" * 20
CAROL = "0x" + "c0" * 20
TOKEN1 = "0x" + "11" * 20
TOKEN2 = "0x" + "22" * 20

BASE_UNIT = 10**18


def units(amount: int, decimals: int) -> str:
    """Format a raw amount with its decimals, e.g. 45351216185 @ 9 -> 45.351216185."""
    return str(Decimal(amount).scaleb(-decimals).normalize())


def deposit(exchange: Exchange, pool: Pool, provider: str, base_amount: int, asset_amount: int) -> int:
    ledger = exchange.ledger
    ledger.mint(provider, BASE_ASSET, base_amount)
    ledger.mint(provider, pool.asset, asset_amount)
    ledger.approve(provider, pool.address, pool.asset, asset_amount)
    return pool.add_liquidity(provider, base_amount, asset_amount)


def base_to_asset(exchange: Exchange) -> dict[str, str]:
    """Two deposits to 10 base / 500 asset, a 1-base swap, the first depositor's exit."""
    pool = exchange.create_pool(TOKEN1)
    deposit(exchange, pool, ALICE, 5 * BASE_UNIT, 250 * 10**9)
    deposit(exchange, pool, BOB, 5 * BASE_UNIT, 250 * 10**9)

    exchange.ledger.mint(CAROL, BASE_ASSET, BASE_UNIT)
    bought = pool.swap_base_for_asset(CAROL, BASE_UNIT, 45 * 10**8)
    base_out, asset_out = pool.remove_liquidity(ALICE, 5 * BASE_UNIT)

    return {
        "asset_bought": units(bought, 9),
        "withdrawn_base": units(base_out, 18),
        "withdrawn_asset": units(asset_out, 9),
    }


def asset_to_base(exchange: Exchange) -> dict[str, str]:
    """Sell 2 asset into 1000 base / 2000 asset."""
    pool = exchange.create_pool(TOKEN1)
    deposit(exchange, pool, ALICE, 1000 * BASE_UNIT, 2000 * 10**9)

    exchange.ledger.mint(BOB, TOKEN1, 2 * 10**9)
    exchange.ledger.approve(BOB, pool.address, TOKEN1, 2 * 10**9)
    bought = pool.swap_asset_for_base(BOB, 2 * 10**9, 0)

    return {"base_bought": units(bought, 18)}


def asset_to_asset(exchange: Exchange) -> dict[str, str]:
    """10 TOKEN1 -> TOKEN2 through 2000/1000 and 1000/1000 pools."""
    token1 = exchange.create_pool(TOKEN1)
    token2 = exchange.create_pool(TOKEN2)
    deposit(exchange, token1, ALICE, 1000 * BASE_UNIT, 2000 * BASE_UNIT)
    deposit(exchange, token2, ALICE, 1000 * BASE_UNIT, 1000 * BASE_UNIT)

    exchange.ledger.mint(CAROL, TOKEN1, 10 * BASE_UNIT)
    exchange.ledger.approve(CAROL, token1.address, TOKEN1, 10 * BASE_UNIT)
    bought = token1.swap_asset_for_asset(CAROL, 10 * BASE_UNIT, 0, TOKEN2)

    return {"token2_bought": units(bought, 18)}


SCENARIOS: dict[str, Callable[[Exchange], dict[str, str]]] = {
    "base-to-asset": base_to_asset,
    "asset-to-base": asset_to_base,
    "asset-to-asset": asset_to_asset,
}


def main() -> int:
    parser = argparse.ArgumentParser(description="Replay reference exchange scenarios")
    parser.add_argument(
        "--scenario",
        choices=sorted(SCENARIOS),
        action="append",
        help="Scenario to replay (repeatable; default: all)",
    )
    parser.add_argument(
        "--fee-multiplier",
        type=int,
        default=ExchangeConfig.fee_multiplier,
        help="Fee multiplier out of --fee-denominator (default: 9975)",
    )
    parser.add_argument(
        "--fee-denominator",
        type=int,
        default=ExchangeConfig.fee_denominator,
        help="Fee denominator (default: 10000)",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show engine logs")
    args = parser.parse_args()

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if args.verbose else logging.WARNING
        ),
    )

    config = ExchangeConfig(fee_multiplier=args.fee_multiplier, fee_denominator=args.fee_denominator)
    results = {}
    for name in args.scenario or list(SCENARIOS):
        results[name] = SCENARIOS[name](Exchange(config=config))
        logger.info("scenario_replayed", scenario=name, **results[name])

    if args.json:
        print(json.dumps(results, indent=2))
    else:
        for name, result in results.items():
            print(f"{name}:")
            for key, value in result.items():
                print(f"  {key:<16} {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
