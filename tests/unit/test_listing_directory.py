"""Tests for the ListingDirectory and listing models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from marketledger.core.listing_directory import ListingDirectory
from marketledger.models.listings import SENTINEL_LISTING, Listing, ListingKey


class TestListingModels:
    def test_sentinel_is_inactive(self):
        assert SENTINEL_LISTING.price == 0
        assert SENTINEL_LISTING.is_active is False

    def test_frozen(self):
        listing = Listing(price=5, seller="alice")
        with pytest.raises(ValidationError):
            listing.price = 10

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            Listing(price=-1, seller="alice")

    def test_key_requires_collection(self):
        with pytest.raises(ValidationError):
            ListingKey(collection="", asset_id=0)

    def test_keys_hash_by_value(self):
        a = ListingKey(collection="c", asset_id=1)
        b = ListingKey(collection="c", asset_id=1)
        assert a == b
        assert {a: 1}[b] == 1
        assert str(a) == "c#1"


class TestListingDirectory:
    def test_absent_key_reads_sentinel(self):
        directory = ListingDirectory()
        assert directory.get(ListingKey(collection="c", asset_id=0)) == SENTINEL_LISTING

    def test_put_get_remove(self):
        directory = ListingDirectory()
        key = ListingKey(collection="c", asset_id=0)
        directory.put(key, Listing(price=7, seller="alice"))
        assert directory.is_listed(key)
        assert directory.items() == [(key, Listing(price=7, seller="alice"))]
        removed = directory.remove(key)
        assert removed.price == 7
        assert not directory.is_listed(key)
        assert directory.items() == []

    def test_put_rejects_sentinel(self):
        directory = ListingDirectory()
        with pytest.raises(ValueError):
            directory.put(ListingKey(collection="c", asset_id=0), SENTINEL_LISTING)

    def test_items_sorted(self):
        directory = ListingDirectory()
        directory.put(ListingKey(collection="b", asset_id=0), Listing(price=1, seller="x"))
        directory.put(ListingKey(collection="a", asset_id=2), Listing(price=1, seller="x"))
        directory.put(ListingKey(collection="a", asset_id=1), Listing(price=1, seller="x"))
        assert [str(k) for k, _ in directory.items()] == ["a#1", "a#2", "b#0"]
