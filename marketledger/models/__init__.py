"""Marketledger data models — all Pydantic v2, all frozen (immutable)."""

from marketledger.models.events import (
    EVENT_TYPE_MAP,
    EventKind,
    ItemBought,
    ItemCanceled,
    ItemListed,
    MarketEvent,
)
from marketledger.models.listings import SENTINEL_LISTING, Listing, ListingKey

__all__ = [
    # listings
    "Listing",
    "ListingKey",
    "SENTINEL_LISTING",
    # events
    "EventKind",
    "MarketEvent",
    "ItemListed",
    "ItemCanceled",
    "ItemBought",
    "EVENT_TYPE_MAP",
]
