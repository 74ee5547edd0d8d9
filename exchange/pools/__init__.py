"""Pool management package.

Provides Pool, the constant-product pool, and PoolRegistry, which creates
pools and maps each asset to its pool.
"""

from .pool import Pool
from .registry import PoolRegistry, derive_pool_address
from .shares import ShareBook
from .types import PoolState, SwapDirection, SwapLeg

__all__ = [
    "Pool",
    "PoolRegistry",
    "PoolState",
    "ShareBook",
    "SwapDirection",
    "SwapLeg",
    "derive_pool_address",
]
