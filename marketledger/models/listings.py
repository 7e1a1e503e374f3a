"""Listing Directory value types.

A listing is keyed by ``(collection, asset_id)``.  A price of zero is the
sentinel for "not listed", so an active listing always has ``price > 0``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ListingKey(BaseModel):
    """Identifies one asset: the collection it belongs to and its id."""

    model_config = ConfigDict(frozen=True)

    collection: str = Field(min_length=1)
    asset_id: int = Field(ge=0)

    def __str__(self) -> str:
        return f"{self.collection}#{self.asset_id}"


class Listing(BaseModel):
    """An offer to sell one asset at a fixed price.

    The ``seller`` never changes for the life of a listing; a new seller
    means cancel and relist.

    Examples
    --------
    >>> Listing(price=100, seller="alice").is_active
    True
    >>> SENTINEL_LISTING.is_active
    False
    """

    model_config = ConfigDict(frozen=True)

    price: int = Field(default=0, ge=0)
    seller: str = ""

    @property
    def is_active(self) -> bool:
        return self.price > 0


# Returned for any key with no active listing.
SENTINEL_LISTING = Listing(price=0, seller="")
