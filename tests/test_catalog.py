"""Tests for CatalogService."""
import pytest

from conftest import mobile_payload
from src.services.catalog import CatalogService
from src.services.errors import NotFoundError


def test_get_product(gateway, make_mobiles):
    phone = make_mobiles(1)[0]
    service = CatalogService(gateway)
    assert service.get_product("mobile", phone["id"])["name"] == "Phone 0"
    with pytest.raises(NotFoundError):
        service.get_product("laptop", phone["id"])


def test_listing_pages_of_eight(gateway, make_mobiles):
    make_mobiles(10)
    acc = CatalogService(gateway).listing("mobile")
    assert len(acc.load_next()) == 8
    assert acc.has_more
    assert len(acc.load_next()) == 2
    assert not acc.has_more


def test_brands_are_unique_and_sorted(gateway, make_mobiles):
    make_mobiles(2)
    gateway.insert("mobile_products", mobile_payload(5, brand="Zeta"))
    gateway.insert("mobile_products", mobile_payload(6, brand="Beta"))
    assert CatalogService(gateway).brands("mobile") == ["Acme", "Beta", "Zeta"]


def test_variants_share_name_and_brand(gateway):
    base = gateway.insert("mobile_products", mobile_payload(1, name="Pixel 8", brand="Google", price=70000))
    gateway.insert("mobile_products", mobile_payload(2, name="Pixel 8", brand="Google", price=60000))
    gateway.insert("mobile_products", mobile_payload(3, name="Pixel 8", brand="Other"))
    variants = CatalogService(gateway).variants("mobile", base)
    assert [v["price"] for v in variants] == [60000]


def test_compare_candidates_exclude_anchor(gateway, make_mobiles):
    phones = make_mobiles(12)
    candidates = CatalogService(gateway).compare_candidates("mobile", phones[0]["id"])
    assert len(candidates) == 10
    assert phones[0]["id"] not in {c["id"] for c in candidates}


def test_search_excludes_anchor(gateway, make_mobiles):
    phones = make_mobiles(3)
    found = CatalogService(gateway).search("mobile", "phone", exclude_id=phones[1]["id"])
    assert {p["id"] for p in found} == {phones[0]["id"], phones[2]["id"]}
    assert CatalogService(gateway).search("mobile", "") == []
