"""Routing across pools.

Module structure:
- multihop.py: AssetToAssetSwap, the two-pool swap via the base asset
- types.py: RoutePlan, the staged legs of a routed swap
"""

from exchange.routing.multihop import AssetToAssetSwap, hold_pools
from exchange.routing.types import RoutePlan

__all__ = ["AssetToAssetSwap", "RoutePlan", "hold_pools"]
