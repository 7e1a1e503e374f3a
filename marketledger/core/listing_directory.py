"""Listing Directory — maps ``(collection, asset_id)`` to an active listing.

Only active listings are stored.  Absent keys read back as the sentinel
listing (``price == 0``), so "listed" and "price is nonzero" are the same
statement.  The directory does no ownership checks; that is the
marketplace's job.
"""

from __future__ import annotations

import logging

from marketledger.models.listings import SENTINEL_LISTING, Listing, ListingKey

logger = logging.getLogger(__name__)


class ListingDirectory:
    """In-memory directory of active listings.

    Examples
    --------
    >>> directory = ListingDirectory()
    >>> key = ListingKey(collection="basic-nft", asset_id=0)
    >>> directory.get(key).is_active
    False
    >>> directory.put(key, Listing(price=100, seller="alice"))
    >>> directory.get(key).price
    100
    """

    def __init__(self) -> None:
        self._listings: dict[ListingKey, Listing] = {}

    def get(self, key: ListingKey) -> Listing:
        """Return the listing for *key*, or the sentinel when not listed."""
        return self._listings.get(key, SENTINEL_LISTING)

    def is_listed(self, key: ListingKey) -> bool:
        return self.get(key).is_active

    def put(self, key: ListingKey, listing: Listing) -> None:
        """Store an active listing under *key*.

        Raises
        ------
        ValueError
            If *listing* has a zero price.  Storing the sentinel would make
            the entry indistinguishable from "not listed".
        """
        if not listing.is_active:
            raise ValueError(f"Cannot store an inactive listing for {key}.")
        self._listings[key] = listing
        logger.debug("Stored listing %s at price %d.", key, listing.price)

    def remove(self, key: ListingKey) -> Listing:
        """Remove and return the listing for *key* (sentinel if absent)."""
        removed = self._listings.pop(key, SENTINEL_LISTING)
        logger.debug("Removed listing %s.", key)
        return removed

    def items(self) -> list[tuple[ListingKey, Listing]]:
        """Return every active listing, sorted by collection then asset id."""
        return sorted(
            self._listings.items(),
            key=lambda kv: (kv[0].collection, kv[0].asset_id),
        )
