"""Shared test fixtures for Marketledger."""

from __future__ import annotations

from pathlib import Path

import pytest

from marketledger.core.asset_authority import InMemoryAssetRegistry
from marketledger.core.event_bus import EventBus
from marketledger.core.event_journal import EventJournal
from marketledger.core.marketplace import Marketplace
from marketledger.core.value_transfer import InMemoryWallets
from marketledger.models.events import MarketEvent

COLLECTION = "basic-nft"
TOKEN_ID = 0
PRICE = 100
MARKET_ID = "nft-marketplace"
DEPLOYER = "deployer"


@pytest.fixture
def registry() -> InMemoryAssetRegistry:
    """Provide an asset registry with token #0 minted to the deployer."""
    reg = InMemoryAssetRegistry()
    reg.mint(COLLECTION, TOKEN_ID, owner=DEPLOYER)
    return reg


@pytest.fixture
def wallets() -> InMemoryWallets:
    """Provide empty in-memory wallets."""
    return InMemoryWallets()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def events(bus: EventBus) -> list[MarketEvent]:
    """Collect every event published on the test bus."""
    seen: list[MarketEvent] = []
    bus.subscribe_all(seen.append)
    return seen


@pytest.fixture
def market(
    registry: InMemoryAssetRegistry, wallets: InMemoryWallets, bus: EventBus
) -> Marketplace:
    """Provide a Marketplace approved to transfer token #0."""
    mp = Marketplace(registry, wallets, marketplace_id=MARKET_ID, bus=bus)
    registry.approve(COLLECTION, TOKEN_ID, agent=MARKET_ID, caller=DEPLOYER)
    return mp


@pytest.fixture
def listed_market(market: Marketplace) -> Marketplace:
    """Provide a Marketplace where the deployer has listed token #0 at PRICE."""
    market.list_item(COLLECTION, TOKEN_ID, PRICE, caller=DEPLOYER)
    return market


@pytest.fixture
def journal(tmp_path: Path) -> EventJournal:
    """Provide a fresh EventJournal backed by a temp SQLite database."""
    return EventJournal(tmp_path / "journal.db")
