"""Adversarial tests — every failure leaves marketplace state unchanged.

A snapshot of listings, proceeds and asset ownership is taken before each
bad call and compared after it.
"""

from __future__ import annotations

import pytest

from marketledger.core.asset_authority import AssetTransferError, InMemoryAssetRegistry
from marketledger.core.errors import (
    AlreadyListed,
    NotListed,
    NotOwner,
    NotProceeds,
    PriceMustBeAboveZero,
    PriceNotMet,
    TransferFailed,
)
from marketledger.core.marketplace import Marketplace
from marketledger.core.value_transfer import InMemoryWallets

COLLECTION = "basic-nft"
TOKEN_ID = 0
PRICE = 100
DEPLOYER = "deployer"
USER = "user"


def _snapshot(market: Marketplace, registry: InMemoryAssetRegistry) -> tuple:
    return (
        market.active_listings(),
        market.get_proceeds(DEPLOYER),
        market.escrowed_value,
        registry.owner_of(COLLECTION, TOKEN_ID),
    )


class TestFailuresLeaveStateUnchanged:
    @pytest.mark.parametrize(
        "call, error",
        [
            (lambda m: m.list_item(COLLECTION, TOKEN_ID, PRICE, caller=DEPLOYER), AlreadyListed),
            (lambda m: m.cancel_listing(COLLECTION, TOKEN_ID, caller=USER), NotOwner),
            (lambda m: m.update_listing(COLLECTION, TOKEN_ID, 0, caller=DEPLOYER), PriceMustBeAboveZero),
            (lambda m: m.update_listing(COLLECTION, 5, 10, caller=DEPLOYER), NotListed),
            (lambda m: m.buy_item(COLLECTION, TOKEN_ID, PRICE - 1, caller=USER), PriceNotMet),
            (lambda m: m.withdraw_proceeds(USER), NotProceeds),
        ],
        ids=["relist", "cancel-non-owner", "update-zero", "update-unlisted", "underpay", "withdraw-empty"],
    )
    def test_rejected_call(self, listed_market, registry, events, call, error):
        before = _snapshot(listed_market, registry)
        event_count = len(events)
        with pytest.raises(error):
            call(listed_market)
        assert _snapshot(listed_market, registry) == before
        assert len(events) == event_count

    def test_blocked_payout_rolls_back(
        self, listed_market: Marketplace, registry, wallets: InMemoryWallets
    ):
        listed_market.buy_item(COLLECTION, TOKEN_ID, PRICE, caller=USER)
        wallets.block(DEPLOYER)
        with pytest.raises(TransferFailed) as exc_info:
            listed_market.withdraw_proceeds(DEPLOYER)
        assert exc_info.value.amount == PRICE
        assert listed_market.get_proceeds(DEPLOYER) == PRICE
        assert wallets.balance_of(DEPLOYER) == 0

        wallets.unblock(DEPLOYER)
        assert listed_market.withdraw_proceeds(DEPLOYER) == PRICE

    def test_raising_payout_rolls_back(self, listed_market: Marketplace, registry):
        class ExplodingWallets:
            def send(self, recipient: str, amount: int) -> bool:
                raise ConnectionError("node unreachable")

        listed_market._wallets = ExplodingWallets()
        listed_market.buy_item(COLLECTION, TOKEN_ID, PRICE, caller=USER)
        with pytest.raises(TransferFailed) as exc_info:
            listed_market.withdraw_proceeds(DEPLOYER)
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert listed_market.get_proceeds(DEPLOYER) == PRICE

    def test_refused_asset_transfer_rolls_back_sale(
        self, listed_market: Marketplace, registry: InMemoryAssetRegistry, events
    ):
        def refuse(collection: str, asset_id: int, sender: str) -> None:
            raise AssetTransferError("receiver rejects assets")

        registry.on_receive(USER, refuse)
        before = _snapshot(listed_market, registry)
        event_count = len(events)
        with pytest.raises(AssetTransferError):
            listed_market.buy_item(COLLECTION, TOKEN_ID, PRICE, caller=USER)
        assert _snapshot(listed_market, registry) == before
        assert len(events) == event_count

    def test_existing_proceeds_survive_rollback(
        self, market: Marketplace, registry: InMemoryAssetRegistry
    ):
        registry.mint(COLLECTION, 1, owner=DEPLOYER)
        registry.approve(COLLECTION, 1, agent=market.marketplace_id, caller=DEPLOYER)
        market.list_item(COLLECTION, TOKEN_ID, PRICE, caller=DEPLOYER)
        market.list_item(COLLECTION, 1, 30, caller=DEPLOYER)
        market.buy_item(COLLECTION, TOKEN_ID, PRICE, caller=USER)

        def refuse(collection: str, asset_id: int, sender: str) -> None:
            raise AssetTransferError("no")

        registry.on_receive("picky", refuse)
        with pytest.raises(AssetTransferError):
            market.buy_item(COLLECTION, 1, 30, caller="picky")
        assert market.get_proceeds(DEPLOYER) == PRICE

    def test_interrupted_asset_transfer_rolls_back_sale(
        self, listed_market: Marketplace, registry: InMemoryAssetRegistry, events
    ):
        def interrupt(collection: str, asset_id: int, sender: str) -> None:
            raise KeyboardInterrupt

        registry.on_receive(USER, interrupt)
        before = _snapshot(listed_market, registry)
        event_count = len(events)
        with pytest.raises(KeyboardInterrupt):
            listed_market.buy_item(COLLECTION, TOKEN_ID, PRICE, caller=USER)
        assert _snapshot(listed_market, registry) == before
        assert len(events) == event_count

        registry._receive_hooks.clear()
        listed_market.buy_item(COLLECTION, TOKEN_ID, PRICE, caller=USER)
        assert registry.owner_of(COLLECTION, TOKEN_ID) == USER

    def test_interrupted_payout_restores_proceeds(
        self, listed_market: Marketplace, wallets: InMemoryWallets
    ):
        listed_market.buy_item(COLLECTION, TOKEN_ID, PRICE, caller=USER)

        def interrupt(amount: int) -> None:
            raise KeyboardInterrupt

        wallets.on_receive(DEPLOYER, interrupt)
        with pytest.raises(KeyboardInterrupt):
            listed_market.withdraw_proceeds(DEPLOYER)
        assert listed_market.get_proceeds(DEPLOYER) == PRICE
        assert wallets.balance_of(DEPLOYER) == 0
