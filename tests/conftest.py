"""Pytest configuration and fixtures."""

import pytest

from exchange.engine import Exchange
from exchange.ledger import InMemoryLedger
from exchange.notifications import RecordingEventSink
from exchange.pools import Pool, PoolRegistry
from tests.helpers import ALICE, BASE_UNIT, TOKEN1, TOKEN2, seed_pool


@pytest.fixture
def ledger() -> InMemoryLedger:
    """Empty in-memory ledger."""
    return InMemoryLedger()


@pytest.fixture
def events() -> RecordingEventSink:
    """Sink that records every published event."""
    return RecordingEventSink()


@pytest.fixture
def registry(ledger: InMemoryLedger, events: RecordingEventSink) -> PoolRegistry:
    """Registry on the shared ledger, publishing to the recording sink."""
    return PoolRegistry(ledger, events=events)


@pytest.fixture
def exchange(ledger: InMemoryLedger, events: RecordingEventSink) -> Exchange:
    """Exchange facade on the shared ledger."""
    return Exchange(ledger=ledger, events=events)


@pytest.fixture
def pool(registry: PoolRegistry) -> Pool:
    """Empty pool for TOKEN1."""
    return registry.create_pool(TOKEN1)


@pytest.fixture
def token1_pool(registry: PoolRegistry) -> Pool:
    """TOKEN1 pool holding 2000 TOKEN1 / 1000 base, seeded by ALICE."""
    return seed_pool(registry, TOKEN1, ALICE, 1000 * BASE_UNIT, 2000 * BASE_UNIT)


@pytest.fixture
def token2_pool(registry: PoolRegistry) -> Pool:
    """TOKEN2 pool holding 1000 TOKEN2 / 1000 base, seeded by ALICE."""
    return seed_pool(registry, TOKEN2, ALICE, 1000 * BASE_UNIT, 1000 * BASE_UNIT)
