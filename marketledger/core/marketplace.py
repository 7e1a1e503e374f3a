"""Marketplace — the listing/settlement state machine.

The Marketplace owns the Listing Directory and the Proceeds Ledger and is
the only code path that mutates them.  Every mutating operation:

1. runs inside the global reentrancy guard,
2. validates all of its preconditions (in a fixed order, so the same bad
   input always reports the same error) before touching state,
3. mutates local state,
4. calls out to external collaborators (asset transfer on ``buy_item``,
   value transfer on ``withdraw_proceeds``) only after local state already
   reflects the outcome, rolling local state back if the call-out fails,
5. publishes its notification event.

Funds move by pull: a sale credits the seller's proceeds, and the seller
withdraws them later.  The marketplace never pushes value during a sale.
"""

from __future__ import annotations

import logging

from marketledger.config import MarketConfig
from marketledger.core.asset_authority import AssetAuthority
from marketledger.core.errors import (
    AlreadyListed,
    NotApprovedForMarketplace,
    NotListed,
    NotOwner,
    NotProceeds,
    PriceMustBeAboveZero,
    PriceNotMet,
    TransferFailed,
)
from marketledger.core.event_bus import EventBus
from marketledger.core.event_journal import EventJournal
from marketledger.core.guard import ReentrancyGuard
from marketledger.core.listing_directory import ListingDirectory
from marketledger.core.proceeds_ledger import ProceedsLedger
from marketledger.core.value_transfer import ValueTransfer
from marketledger.models.events import ItemBought, ItemCanceled, ItemListed
from marketledger.models.listings import Listing, ListingKey

logger = logging.getLogger(__name__)


class Marketplace:
    """Fixed-price marketplace over externally owned assets.

    Parameters
    ----------
    authority:
        System of record for asset ownership, approval and transfer.
    wallets:
        Pays out withdrawn proceeds.
    marketplace_id:
        The identity owners must approve as transfer agent.  Defaults to
        ``config.marketplace_id``.
    bus:
        Event bus notifications are published on.  A private bus is
        created when omitted.
    config:
        Runtime configuration.  Uses defaults if not provided.

    Examples
    --------
    >>> from marketledger.core.asset_authority import InMemoryAssetRegistry
    >>> from marketledger.core.value_transfer import InMemoryWallets
    >>> registry = InMemoryAssetRegistry()
    >>> market = Marketplace(registry, InMemoryWallets(), marketplace_id="market")
    >>> registry.mint("basic-nft", 0, owner="alice")
    >>> registry.approve("basic-nft", 0, agent="market", caller="alice")
    >>> market.list_item("basic-nft", 0, 100, caller="alice")
    >>> market.get_listing("basic-nft", 0)
    Listing(price=100, seller='alice')
    """

    def __init__(
        self,
        authority: AssetAuthority,
        wallets: ValueTransfer,
        *,
        marketplace_id: str | None = None,
        bus: EventBus | None = None,
        config: MarketConfig | None = None,
    ) -> None:
        self.config = config or MarketConfig()
        self.marketplace_id = marketplace_id or self.config.marketplace_id
        self.bus = bus or EventBus()
        self._authority = authority
        self._wallets = wallets
        self._listings = ListingDirectory()
        self._proceeds = ProceedsLedger()
        self._guard = ReentrancyGuard()

    @classmethod
    def from_config(
        cls,
        authority: AssetAuthority,
        wallets: ValueTransfer,
        config: MarketConfig,
    ) -> Marketplace:
        """Build a marketplace whose events are journaled per *config*."""
        market = cls(authority, wallets, config=config)
        if config.journal_enabled:
            journal = EventJournal(config.journal_path)
            market.bus.subscribe_all(journal.append)
            logger.info("Journaling marketplace events to %s.", config.journal_path)
        return market

    # ------------------------------------------------------------------
    # Precondition checks
    # ------------------------------------------------------------------

    def _require_listed(self, key: ListingKey) -> Listing:
        listing = self._listings.get(key)
        if not listing.is_active:
            raise NotListed(key.collection, key.asset_id)
        return listing

    def _require_not_listed(self, key: ListingKey) -> None:
        if self._listings.is_listed(key):
            raise AlreadyListed(key.collection, key.asset_id)

    def _require_owner(self, key: ListingKey, caller: str) -> None:
        # Always the live owner, never the stored seller.
        if self._authority.owner_of(key.collection, key.asset_id) != caller:
            raise NotOwner(key.collection, key.asset_id, caller)

    @staticmethod
    def _require_positive_price(price: int) -> None:
        if price <= 0:
            raise PriceMustBeAboveZero(price)

    # ------------------------------------------------------------------
    # Listing lifecycle
    # ------------------------------------------------------------------

    def list_item(self, collection: str, asset_id: int, price: int, caller: str) -> None:
        """List an asset for sale at *price*.

        Raises
        ------
        AlreadyListed
            The asset already has an active listing.
        NotOwner
            *caller* is not the asset's live owner.
        PriceMustBeAboveZero
            *price* is zero or negative.
        NotApprovedForMarketplace
            The marketplace is not the asset's approved transfer agent.
        """
        key = ListingKey(collection=collection, asset_id=asset_id)
        with self._guard("list_item"):
            self._require_not_listed(key)
            self._require_owner(key, caller)
            self._require_positive_price(price)
            if self._authority.get_approved(collection, asset_id) != self.marketplace_id:
                raise NotApprovedForMarketplace(collection, asset_id)

            self._listings.put(key, Listing(price=price, seller=caller))
            logger.info("Listed %s at %d by %s.", key, price, caller)

            self.bus.publish(
                ItemListed(
                    marketplace_id=self.marketplace_id,
                    seller=caller,
                    collection=collection,
                    asset_id=asset_id,
                    price=price,
                )
            )

    def cancel_listing(self, collection: str, asset_id: int, caller: str) -> None:
        """Remove an active listing.  Only the live owner may cancel."""
        key = ListingKey(collection=collection, asset_id=asset_id)
        with self._guard("cancel_listing"):
            self._require_listed(key)
            self._require_owner(key, caller)

            self._listings.remove(key)
            logger.info("Canceled listing %s by %s.", key, caller)

            self.bus.publish(
                ItemCanceled(
                    marketplace_id=self.marketplace_id,
                    owner=caller,
                    collection=collection,
                    asset_id=asset_id,
                )
            )

    def update_listing(
        self, collection: str, asset_id: int, new_price: int, caller: str
    ) -> None:
        """Change the price of an active listing.

        The seller is kept as is.  A zero price is rejected with
        ``PriceMustBeAboveZero``; use ``cancel_listing`` to delist.
        """
        key = ListingKey(collection=collection, asset_id=asset_id)
        with self._guard("update_listing"):
            listing = self._require_listed(key)
            self._require_owner(key, caller)
            self._require_positive_price(new_price)

            updated = listing.model_copy(update={"price": new_price})
            self._listings.put(key, updated)
            logger.info("Updated %s price %d -> %d.", key, listing.price, new_price)

            self.bus.publish(
                ItemListed(
                    marketplace_id=self.marketplace_id,
                    seller=updated.seller,
                    collection=collection,
                    asset_id=asset_id,
                    price=new_price,
                )
            )

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def buy_item(
        self, collection: str, asset_id: int, payment: int, caller: str
    ) -> ItemBought:
        """Buy a listed asset, paying *payment* (at least the listing price).

        The whole payment is credited to the seller; nothing is refunded.
        The seller is credited and the listing removed before the asset
        authority is asked to move the asset, so anything the transfer runs
        sees the asset as already sold.  If the transfer fails, the credit
        and the listing are restored and the error propagates.

        Returns the published ``ItemBought`` event.

        Raises
        ------
        NotListed
            The asset has no active listing.
        PriceNotMet
            *payment* is below the listing price.
        """
        key = ListingKey(collection=collection, asset_id=asset_id)
        with self._guard("buy_item"):
            listing = self._require_listed(key)
            if payment < listing.price:
                raise PriceNotMet(collection, asset_id, listing.price)

            previous_balance = self._proceeds.balance_of(listing.seller)
            self._proceeds.credit(listing.seller, payment)
            self._listings.remove(key)
            try:
                self._authority.transfer(
                    collection,
                    asset_id,
                    listing.seller,
                    caller,
                    operator=self.marketplace_id,
                )
            except BaseException:
                self._proceeds.restore(listing.seller, previous_balance)
                self._listings.put(key, listing)
                logger.warning(
                    "Transfer of %s to %s failed; sale rolled back.", key, caller
                )
                raise

            logger.info(
                "Sold %s from %s to %s for %d (listed at %d).",
                key,
                listing.seller,
                caller,
                payment,
                listing.price,
            )
            return self.bus.publish(
                ItemBought(
                    marketplace_id=self.marketplace_id,
                    buyer=caller,
                    collection=collection,
                    asset_id=asset_id,
                    price=listing.price,
                )
            )

    def withdraw_proceeds(self, caller: str) -> int:
        """Pay out *caller*'s whole proceeds balance and return the amount.

        The balance is zeroed before the payment goes out.  If the payment
        fails, the balance is restored and ``TransferFailed`` is raised.

        Raises
        ------
        NotProceeds
            *caller* has nothing to withdraw.
        TransferFailed
            The value transfer reported failure or raised.
        """
        with self._guard("withdraw_proceeds"):
            if self._proceeds.balance_of(caller) <= 0:
                raise NotProceeds(caller)

            amount = self._proceeds.drain(caller)
            try:
                sent = self._wallets.send(caller, amount)
            except Exception as exc:
                self._proceeds.restore(caller, amount)
                logger.warning("Payout of %d to %s raised: %s", amount, caller, exc)
                raise TransferFailed(caller, amount) from exc
            except BaseException:
                self._proceeds.restore(caller, amount)
                raise
            if not sent:
                self._proceeds.restore(caller, amount)
                logger.warning("Payout of %d to %s was refused.", amount, caller)
                raise TransferFailed(caller, amount)

            logger.info("Withdrew %d proceeds to %s.", amount, caller)
            return amount

    # ------------------------------------------------------------------
    # Queries (read-only)
    # ------------------------------------------------------------------

    def get_listing(self, collection: str, asset_id: int) -> Listing:
        """Return the listing, or the zero-price sentinel when not listed."""
        return self._listings.get(ListingKey(collection=collection, asset_id=asset_id))

    def get_proceeds(self, seller: str) -> int:
        return self._proceeds.balance_of(seller)

    def active_listings(self) -> list[tuple[ListingKey, Listing]]:
        """Every active listing, sorted by collection then asset id."""
        return self._listings.items()

    @property
    def escrowed_value(self) -> int:
        """Value held for sellers: the sum of all unwithdrawn proceeds."""
        return self._proceeds.total()
