"""Data models: address/amount types, events, and HTTP request/response bodies."""

from exchange.models.events import (
    AssetPurchase,
    AssetToAssetPurchase,
    BasePurchase,
    Divestment,
    Event,
    Investment,
    PoolCreated,
)
from exchange.models.types import Address, Uint256, normalize_address

__all__ = [
    "Address",
    "Uint256",
    "normalize_address",
    "Event",
    "AssetPurchase",
    "BasePurchase",
    "AssetToAssetPurchase",
    "Investment",
    "Divestment",
    "PoolCreated",
]
