"""Tests for article/product filtering and sorting."""
import pytest

from src.models.category import ALL_SUBCATEGORIES, HOME, Category, is_popular_in, popular_flag_column
from src.services.listing_filter import (
    SORT_PRICE_ASC, SORT_PRICE_DESC, category_hero, filter_articles, filter_products,
    group_variants, home_sections, sort_products, unique_brands,
)


ARTICLES = [
    {"id": 1, "title": "Best PC builds", "category": "GAMES", "subcategory": "PC", "popular_in_games": True},
    {"id": 2, "title": "PS5 exclusives", "category": "GAMES", "subcategory": "PLAYSTATION"},
    {"id": 3, "title": "Xbox news", "category": "GAMES", "subcategory": "XBOX", "popular": True},
    {"id": 4, "title": "Tech deals this week", "category": "TECH", "subcategory": "Tech Deals",
     "featured": True, "popular_in_tech": True},
    {"id": 5, "title": "PC GPU prices", "category": "GAMES", "subcategory": "PC"},
    {"id": 6, "title": "Chip news", "category": "TECH", "subcategory": "News", "popular": True},
]


def _ids(records):
    return [r["id"] for r in records]


def test_category_filter_keeps_order():
    assert _ids(filter_articles(ARTICLES, Category.GAMES)) == [1, 2, 3, 5]


def test_subcategory_is_subset_of_all():
    pc = filter_articles(ARTICLES, "GAMES", "PC")
    everything = filter_articles(ARTICLES, "GAMES", ALL_SUBCATEGORIES)
    assert _ids(pc) == [1, 5]
    assert set(_ids(pc)) <= set(_ids(everything))
    assert _ids(filter_articles(ARTICLES, "GAMES", None)) == _ids(everything)


def test_popular_uses_category_flag():
    assert _ids(filter_articles(ARTICLES, Category.GAMES, popular=True)) == [1]
    assert _ids(filter_articles(ARTICLES, Category.TECH, popular=True)) == [4]


def test_home_popular_uses_global_flag():
    assert _ids(filter_articles(ARTICLES, HOME, popular=True)) == [3, 6]


def test_search_matches_title_case_insensitively():
    assert _ids(filter_articles(ARTICLES, None, search="pc")) == [1, 5]


def test_unknown_category_raises():
    with pytest.raises(ValueError):
        filter_articles(ARTICLES, "SPORTS")


def test_popular_flag_table():
    assert popular_flag_column("gadgets") == "popular_in_gadgets"
    assert is_popular_in({"popular_in_stocks": True}, Category.STOCKS)
    assert not is_popular_in({"popular": True}, Category.STOCKS)


def test_home_sections():
    sections = home_sections(ARTICLES)
    assert _ids(sections["featured"]) == [4]
    assert _ids(sections["tech_deals"]) == [4]
    assert _ids(sections["popular"]) == [3, 6]
    assert _ids(sections["recent"]) == [1, 2, 3, 4, 5, 6]


def test_home_featured_capped_at_six():
    blogs = [{"id": n, "featured": True, "category": "TECH"} for n in range(9)]
    assert len(home_sections(blogs)["featured"]) == 6


def test_category_hero():
    assert category_hero([]) == (None, [])
    hero, grid = category_hero([{"id": 1}, {"id": 2}, {"id": 3}, {"id": 4}])
    assert hero == {"id": 1}
    assert _ids(grid) == [2, 3]


PRODUCTS = [
    {"id": "a", "name": "Galaxy S24", "brand": "Samsung", "price": 70000},
    {"id": "b", "name": "Pixel 8", "brand": "Google", "price": 60000},
    {"id": "c", "name": "Galaxy A55", "brand": "Samsung", "price": 40000},
    {"id": "d", "name": "Pixel 8a", "brand": "Google", "price": 40000},
]


def test_sort_products_is_stable():
    assert _ids(sort_products(PRODUCTS, SORT_PRICE_ASC)) == ["c", "d", "b", "a"]
    assert _ids(sort_products(PRODUCTS, SORT_PRICE_DESC)) == ["a", "b", "c", "d"]
    assert _ids(sort_products(PRODUCTS)) == ["a", "b", "c", "d"]
    with pytest.raises(ValueError):
        sort_products(PRODUCTS, "rating")


def test_filter_products_by_search_and_brand():
    assert _ids(filter_products(PRODUCTS, search="galaxy")) == ["a", "c"]
    assert _ids(filter_products(PRODUCTS, brand="Google", sort=SORT_PRICE_ASC)) == ["d", "b"]
    assert _ids(filter_products(PRODUCTS, brand="all")) == ["a", "b", "c", "d"]


def test_unique_brands_and_variants():
    assert unique_brands(PRODUCTS) == ["Google", "Samsung"]
    families = group_variants([
        {"id": 1, "name": "Pixel 8", "brand": "Google"},
        {"id": 2, "name": "pixel 8", "brand": "google"},
        {"id": 3, "name": "Pixel 8a", "brand": "Google"},
    ])
    assert sorted(len(v) for v in families.values()) == [1, 2]
