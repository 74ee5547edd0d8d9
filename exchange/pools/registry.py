"""Pool registry: one pool per asset.

The registry creates pools, maps each asset to its pool, and is the lookup
pools use to route asset-to-asset swaps. Entries are never replaced or
removed.
"""

from __future__ import annotations

import hashlib
import threading
import weakref
from collections.abc import Iterator

import structlog
from eth_abi import encode  # type: ignore[attr-defined]

from exchange.config import DEFAULT_CONFIG, ExchangeConfig
from exchange.constants import BASE_ASSET
from exchange.errors import InvalidAssetAddress, PoolAlreadyExists, PoolNotFound
from exchange.ledger import AssetLedger
from exchange.models.events import PoolCreated
from exchange.models.types import is_valid_address, is_zero_address, normalize_address, short
from exchange.notifications import EventSink, publish
from exchange.pools.pool import Pool

logger = structlog.get_logger()

# Pool accounts claimed on each ledger, across every registry sharing it
_claimed_accounts: weakref.WeakKeyDictionary[AssetLedger, set[str]] = weakref.WeakKeyDictionary()
_claims_lock = threading.Lock()


def derive_pool_address(registry_address: str, asset: str) -> str:
    """Deterministic pool address for an asset.

    The last 20 bytes of sha256(abi.encode(registry, asset)), so the same
    registry always deploys an asset's pool at the same address.
    """
    encoded = encode(
        ["address", "address"],
        [bytes.fromhex(registry_address[2:]), bytes.fromhex(asset[2:])],
    )
    return "0x" + hashlib.sha256(encoded).digest()[-20:].hex()


class PoolRegistry:
    """Registry of pools keyed by their paired asset.

    Args:
        ledger: Ledger every created pool keeps its reserves on
        events: Sink passed to created pools, and used for PoolCreated
        config: Fee policy for created pools, and the registry address
    """

    def __init__(
        self,
        ledger: AssetLedger,
        *,
        events: EventSink | None = None,
        config: ExchangeConfig = DEFAULT_CONFIG,
    ) -> None:
        self.ledger = ledger
        self.events = events
        self.config = config
        self._pools: dict[str, Pool] = {}
        self._lock = threading.RLock()

    @property
    def address(self) -> str:
        return self.config.registry_address

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, asset: object) -> bool:
        return isinstance(asset, str) and self.resolve(asset) is not None

    def __iter__(self) -> Iterator[Pool]:
        with self._lock:
            return iter(list(self._pools.values()))

    @property
    def assets(self) -> list[str]:
        with self._lock:
            return list(self._pools)

    def resolve(self, asset: str) -> Pool | None:
        """Pool registered for `asset`, or None (malformed assets included)."""
        if not is_valid_address(asset):
            return None
        with self._lock:
            return self._pools.get(normalize_address(asset))

    def get_pool(self, asset: str) -> Pool:
        """Pool registered for `asset`.

        Raises:
            PoolNotFound: If no pool trades `asset`
        """
        pool = self.resolve(asset)
        if pool is None:
            raise PoolNotFound(f"No pool for asset {asset}")
        return pool

    def create_pool(self, asset: str) -> Pool:
        """Create and register the pool for `asset`.

        Raises:
            InvalidAssetAddress: If asset is the zero address or malformed,
                or its derived pool address is already taken on the ledger
            PoolAlreadyExists: If `asset` already has a pool
        """
        asset = _validate_asset(asset)
        with self._lock:
            if asset in self._pools:
                raise PoolAlreadyExists(f"Pool for {asset} already exists")
            pool = Pool(
                derive_pool_address(self.address, asset),
                asset,
                self.ledger,
                registry=self,
                events=self.events,
                config=self.config,
            )
            self._claim_account(pool.address)
            self._pools[asset] = pool

        logger.info("pool_created", asset=short(asset), pool=short(pool.address))
        publish(self.events, PoolCreated(asset=asset, pool=pool.address))
        return pool

    def get_or_create_pool(self, asset: str) -> Pool:
        """Existing pool for `asset`, creating it on first request."""
        asset = _validate_asset(asset)
        with self._lock:
            existing = self._pools.get(asset)
            if existing is not None:
                return existing
            return self.create_pool(asset)

    def register(self, asset: str, pool: Pool) -> bool:
        """Register an externally constructed pool.

        Returns:
            True if newly registered, False if this exact pool already was

        Raises:
            InvalidAssetAddress: If asset is invalid or is not the pool's
                asset, or the pool's address is already in use
            PoolAlreadyExists: If a different pool is registered for `asset`
        """
        asset = _validate_asset(asset)
        if pool.asset != asset:
            raise InvalidAssetAddress(f"{pool!r} does not trade {asset}")
        if pool.ledger is not self.ledger:
            raise InvalidAssetAddress(f"{pool!r} keeps its reserves on another ledger")

        with self._lock:
            existing = self._pools.get(asset)
            if existing is pool:
                return False
            if existing is not None:
                raise PoolAlreadyExists(f"Pool for {asset} already exists at {existing.address}")
            self._claim_account(pool.address)
            try:
                pool.attach_registry(self)
            except InvalidAssetAddress:
                self._release_account(pool.address)
                raise
            self._pools[asset] = pool

        logger.info("pool_registered", asset=short(asset), pool=short(pool.address))
        publish(self.events, PoolCreated(asset=asset, pool=pool.address))
        return True

    def _claim_account(self, address: str) -> None:
        """Reserve `address` as a pool account on this registry's ledger.

        Two pools on one account would share a base balance, so every pool
        address is unique per ledger, across registries.

        Raises:
            InvalidAssetAddress: If the address is the base asset, this
                registry, or an account another pool already holds
        """
        if address in (BASE_ASSET, self.address):
            raise InvalidAssetAddress(f"{address} cannot hold pool reserves")
        with _claims_lock:
            claimed = _claimed_accounts.setdefault(self.ledger, set())
            if address in claimed:
                raise InvalidAssetAddress(f"Pool account {address} is already in use")
            claimed.add(address)

    def _release_account(self, address: str) -> None:
        with _claims_lock:
            _claimed_accounts.get(self.ledger, set()).discard(address)


def _validate_asset(asset: str) -> str:
    if not is_valid_address(asset):
        raise InvalidAssetAddress(f"Invalid asset address: {asset!r}")
    if is_zero_address(asset):
        raise InvalidAssetAddress("The zero address is the base asset and cannot have a pool")
    return normalize_address(asset)
