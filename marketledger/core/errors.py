"""Marketplace failure kinds.

Every failure is a precondition violation reported synchronously to the
caller.  Each kind is its own class so callers can catch exactly the
violation they care about; all of them derive from ``MarketplaceError``.
"""

from __future__ import annotations


class MarketplaceError(RuntimeError):
    """Base class for every marketplace precondition violation."""


class PriceMustBeAboveZero(MarketplaceError):
    """Raised when a listing price is zero or negative."""

    def __init__(self, price: int) -> None:
        super().__init__(f"Price must be above zero, got {price}.")
        self.price = price


class NotApprovedForMarketplace(MarketplaceError):
    """Raised when the marketplace is not the approved transfer agent."""

    def __init__(self, collection: str, asset_id: int) -> None:
        super().__init__(
            f"Marketplace is not approved to transfer {collection}#{asset_id}."
        )
        self.collection = collection
        self.asset_id = asset_id


class AlreadyListed(MarketplaceError):
    """Raised when listing an asset that already has an active listing."""

    def __init__(self, collection: str, asset_id: int) -> None:
        super().__init__(f"{collection}#{asset_id} is already listed.")
        self.collection = collection
        self.asset_id = asset_id


class NotOwner(MarketplaceError):
    """Raised when the caller is not the live owner of the asset."""

    def __init__(self, collection: str, asset_id: int, caller: str) -> None:
        super().__init__(f"{caller!r} does not own {collection}#{asset_id}.")
        self.collection = collection
        self.asset_id = asset_id
        self.caller = caller


class NotListed(MarketplaceError):
    """Raised when an operation needs an active listing and there is none."""

    def __init__(self, collection: str, asset_id: int) -> None:
        super().__init__(f"{collection}#{asset_id} is not listed.")
        self.collection = collection
        self.asset_id = asset_id


class PriceNotMet(MarketplaceError):
    """Raised when a payment is below the listing price."""

    def __init__(self, collection: str, asset_id: int, required_price: int) -> None:
        super().__init__(
            f"Price not met for {collection}#{asset_id}: requires {required_price}."
        )
        self.collection = collection
        self.asset_id = asset_id
        self.required_price = required_price


class NotProceeds(MarketplaceError):
    """Raised when withdrawing with a zero proceeds balance."""

    def __init__(self, seller: str) -> None:
        super().__init__(f"No proceeds to withdraw for {seller!r}.")
        self.seller = seller


class TransferFailed(MarketplaceError):
    """Raised when paying out proceeds fails.  The withdrawal is rolled back."""

    def __init__(self, recipient: str, amount: int) -> None:
        super().__init__(f"Transfer of {amount} to {recipient!r} failed.")
        self.recipient = recipient
        self.amount = amount


class ReentrantCallError(MarketplaceError):
    """Raised when a guarded operation is re-entered before it completes."""
