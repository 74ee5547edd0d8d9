"""Constant-product exchange engine."""

from exchange.config import ExchangeConfig
from exchange.engine import Exchange, get_default_exchange
from exchange.ledger import AssetLedger, InMemoryLedger
from exchange.pools import Pool, PoolRegistry
from exchange.pricing import get_output_amount

__version__ = "0.1.0"
__all__ = [
    "AssetLedger",
    "Exchange",
    "ExchangeConfig",
    "InMemoryLedger",
    "Pool",
    "PoolRegistry",
    "get_default_exchange",
    "get_output_amount",
    "__version__",
]
