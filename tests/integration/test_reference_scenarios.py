"""End-to-end reference scenarios on an in-memory exchange.

Amounts are checked to the last unit: the base asset has 18 decimals, the
paired asset in the first two scenarios has 9.
"""

import pytest

from exchange import Exchange
from exchange.models.events import AssetPurchase, Divestment, Investment, PoolCreated
from tests.helpers import ALICE, ASSET_UNIT_9, BASE, BASE_UNIT, BOB, CAROL, TOKEN1, TOKEN2, deposit, fund


class TestBaseToAssetScenario:
    """Two deposits build 10 base / 500 asset; a 1-base swap; a full withdrawal."""

    @pytest.fixture
    def scenario(self, exchange: Exchange):
        pool = exchange.create_pool(TOKEN1)
        deposit(pool, ALICE, 5 * BASE_UNIT, 250 * ASSET_UNIT_9)
        deposit(pool, BOB, 5 * BASE_UNIT, 250 * ASSET_UNIT_9)
        return pool

    def test_deposits(self, scenario):
        assert scenario.get_base_reserve() == 10 * BASE_UNIT
        assert scenario.get_reserve() == 500 * ASSET_UNIT_9
        assert scenario.shares_by_provider() == {ALICE: 5 * BASE_UNIT, BOB: 5 * BASE_UNIT}

    def test_swap_and_withdrawal(self, scenario, exchange, events):
        ledger = exchange.ledger
        fund(ledger, CAROL, base=BASE_UNIT)

        bought = scenario.swap_base_for_asset(CAROL, BASE_UNIT, 45 * ASSET_UNIT_9 // 10)
        assert bought == 45_351_216_185

        base_out, asset_out = scenario.remove_liquidity(ALICE, 5 * BASE_UNIT)
        assert base_out == 5_500_000_000_000_000_000
        assert asset_out == 227_324_391_907
        assert ledger.balance_of(ALICE, BASE) == base_out
        assert ledger.balance_of(ALICE, TOKEN1) == asset_out

        assert [type(e) for e in events.events] == [
            PoolCreated,
            Investment,
            Investment,
            AssetPurchase,
            Divestment,
        ]


class TestAssetToBaseScenario:
    def test_two_asset_for_base(self, exchange: Exchange):
        pool = exchange.create_pool(TOKEN1)
        deposit(pool, ALICE, 1000 * BASE_UNIT, 2000 * ASSET_UNIT_9)
        fund(exchange.ledger, BOB, assets={TOKEN1: 2 * ASSET_UNIT_9})
        exchange.ledger.approve(BOB, pool.address, TOKEN1, 2 * ASSET_UNIT_9)

        assert pool.swap_asset_for_base(BOB, 2 * ASSET_UNIT_9, 0) == 996_505_985_279_683_515


class TestAssetToAssetScenario:
    """TOKEN1 pool 2000/1000 base, TOKEN2 pool 1000/1000 base."""

    @pytest.fixture
    def pools(self, exchange: Exchange):
        token1 = exchange.create_pool(TOKEN1)
        token2 = exchange.create_pool(TOKEN2)
        deposit(token1, ALICE, 1000 * BASE_UNIT, 2000 * BASE_UNIT)
        deposit(token2, ALICE, 1000 * BASE_UNIT, 1000 * BASE_UNIT)
        return token1, token2

    def test_token1_to_token2(self, pools, exchange):
        token1, _ = pools
        fund(exchange.ledger, CAROL, assets={TOKEN1: 10 * BASE_UNIT})
        exchange.ledger.approve(CAROL, token1.address, TOKEN1, 10 * BASE_UNIT)

        assert token1.swap_asset_for_asset(CAROL, 10 * BASE_UNIT, 0, TOKEN2) == 4_925_956_256_854_949_537

    def test_token2_to_token1(self, pools, exchange):
        _, token2 = pools
        fund(exchange.ledger, CAROL, assets={TOKEN2: 10 * BASE_UNIT})
        exchange.ledger.approve(CAROL, token2.address, TOKEN2, 10 * BASE_UNIT)

        assert token2.swap_asset_for_asset(CAROL, 10 * BASE_UNIT, 0, TOKEN1) == 19_898_684_427_080_450_088
