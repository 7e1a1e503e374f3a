"""Marketledger: fixed-price asset marketplace with a pull-based proceeds ledger.

Owners list uniquely identified assets at a fixed price, buyers purchase
them by paying at least that price, and sellers withdraw accumulated
proceeds.  Asset custody never leaves the owner until the moment of sale;
ownership and transfer approval are always read live from an external
asset authority.
"""

__version__ = "0.1.0"

from marketledger.core.errors import MarketplaceError
from marketledger.core.marketplace import Marketplace
from marketledger.models.listings import Listing, ListingKey

__all__ = ["Marketplace", "MarketplaceError", "Listing", "ListingKey", "__version__"]
