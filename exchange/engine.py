"""Exchange facade wiring a ledger, a registry and an event sink together."""

from __future__ import annotations

from functools import lru_cache

import structlog

from exchange.config import DEFAULT_CONFIG, ExchangeConfig
from exchange.ledger import AssetLedger, InMemoryLedger
from exchange.notifications import EventSink, LoggingEventSink
from exchange.pools import Pool, PoolRegistry

logger = structlog.get_logger()


class Exchange:
    """One ledger, one registry, one event sink.

    Pool operations are called on the Pool objects themselves; the
    facade only builds and looks them up.
    """

    def __init__(
        self,
        ledger: AssetLedger | None = None,
        events: EventSink | None = None,
        config: ExchangeConfig = DEFAULT_CONFIG,
    ) -> None:
        self.ledger = ledger if ledger is not None else InMemoryLedger()
        self.events = events
        self.config = config
        self.registry = PoolRegistry(self.ledger, events=events, config=config)

    def create_pool(self, asset: str) -> Pool:
        return self.registry.create_pool(asset)

    def pool(self, asset: str) -> Pool:
        """Registered pool for `asset` (raises PoolNotFound)."""
        return self.registry.get_pool(asset)

    def pools(self) -> list[Pool]:
        return list(self.registry)


@lru_cache(maxsize=1)
def get_default_exchange() -> Exchange:
    """Process-wide in-memory exchange configured from the environment."""
    config = ExchangeConfig.from_env()
    logger.info(
        "exchange_initialized",
        fee_multiplier=config.fee_multiplier,
        fee_denominator=config.fee_denominator,
        registry=config.registry_address,
    )
    return Exchange(events=LoggingEventSink(), config=config)
