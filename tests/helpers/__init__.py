"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Account and asset addresses, amount units
- factories: Ledger funding and pool seeding helpers
"""

from tests.helpers.constants import (
    ALICE,
    ASSET_UNIT_9,
    BASE,
    BASE_UNIT,
    BOB,
    CAROL,
    TOKEN1,
    TOKEN2,
    TOKEN3,
)
from tests.helpers.factories import balances, deposit, fund, seed_pool

__all__ = [
    # Constants
    "ALICE",
    "BOB",
    "CAROL",
    "TOKEN1",
    "TOKEN2",
    "TOKEN3",
    "BASE",
    "BASE_UNIT",
    "ASSET_UNIT_9",
    # Factories
    "fund",
    "deposit",
    "seed_pool",
    "balances",
]
