"""Notification events emitted by the marketplace.

External indexers and UIs consume these.  Each event is a frozen Pydantic
model; ``payload_hash`` is filled in by the event bus on publish.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """The three notification event types."""

    ITEM_LISTED = "item_listed"
    ITEM_CANCELED = "item_canceled"
    ITEM_BOUGHT = "item_bought"


class MarketEvent(BaseModel):
    """Fields shared by every marketplace event."""

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_kind: EventKind
    marketplace_id: str = ""
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    payload_hash: str = ""  # SHA-256 of canonical content fields
    collection: str
    asset_id: int

    @property
    def party(self) -> str:
        """The identity the event is about: seller, owner or buyer."""
        return ""


class ItemListed(MarketEvent):
    """A listing was created, or its price was updated."""

    event_kind: EventKind = EventKind.ITEM_LISTED
    seller: str
    price: int

    @property
    def party(self) -> str:
        return self.seller


class ItemCanceled(MarketEvent):
    """A listing was removed by the asset's owner."""

    event_kind: EventKind = EventKind.ITEM_CANCELED
    owner: str

    @property
    def party(self) -> str:
        return self.owner


class ItemBought(MarketEvent):
    """A listed asset was sold.  ``price`` is the listing price, not the payment."""

    event_kind: EventKind = EventKind.ITEM_BOUGHT
    buyer: str
    price: int

    @property
    def party(self) -> str:
        return self.buyer


# Registry for deserialization by event_kind
EVENT_TYPE_MAP: dict[EventKind, type[MarketEvent]] = {
    EventKind.ITEM_LISTED: ItemListed,
    EventKind.ITEM_CANCELED: ItemCanceled,
    EventKind.ITEM_BOUGHT: ItemBought,
}
