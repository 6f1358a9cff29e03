import asyncio
from decimal import Decimal

import pytest

from checkout_service.exceptions import CatalogUnavailable


class TestGetListing:
    def test_listing_with_business_id_and_json_photos(self, catalog_client):
        listing = asyncio.run(catalog_client.get_listing("L1"))

        assert listing.id == "L1"
        assert listing.vendor_id == "V1"
        assert listing.price == Decimal("10.0")
        assert listing.photo_url == "https://img.test/l1.jpg"

    def test_listing_with_vendor_id_and_string_price(self, catalog_client):
        listing = asyncio.run(catalog_client.get_listing("L2"))

        assert listing.vendor_id == "V1"
        assert listing.price == Decimal("5.00")
        assert listing.photo_url == "https://img.test/l2.jpg"

    def test_listing_without_price_or_photo(self, catalog_client):
        listing = asyncio.run(catalog_client.get_listing("L4"))

        assert listing.price is None
        assert listing.photo_url is None

    def test_missing_listing(self, catalog_client):
        assert asyncio.run(catalog_client.get_listing("NOPE")) is None

    def test_catalog_error_status(self, catalog_client):
        with pytest.raises(CatalogUnavailable):
            asyncio.run(catalog_client.get_listing("BROKEN"))

    def test_catalog_unreachable(self, catalog_client):
        with pytest.raises(CatalogUnavailable):
            asyncio.run(catalog_client.get_listing("DOWN"))


class TestGetVendor:
    def test_vendor_summary(self, catalog_client):
        vendor = asyncio.run(catalog_client.get_vendor("V1"))

        assert vendor.id == "V1"
        assert vendor.business_name == "Barrio Bakery"
        assert vendor.full_name is None

    def test_vendor_failures_are_not_fatal(self, catalog_client):
        assert asyncio.run(catalog_client.get_vendor("NOPE")) is None
        assert asyncio.run(catalog_client.get_vendor("BROKEN")) is None
        assert asyncio.run(catalog_client.get_vendor("DOWN")) is None
