"""Pure filtering and sorting for article and product listings."""
from config import ARTICLE_PAGE_SIZE, MAX_HOME_FEATURED
from src.models.category import ALL_SUBCATEGORIES, HOME, Category, is_popular_in

SORT_DEFAULT = "default"
SORT_PRICE_ASC = "price-low-high"
SORT_PRICE_DESC = "price-high-low"
SORT_OPTIONS = {
    SORT_DEFAULT: "Default",
    SORT_PRICE_ASC: "Price: Low to High",
    SORT_PRICE_DESC: "Price: High to Low",
}

ALL_BRANDS = "all"


def _matches_search(text, term: str | None) -> bool:
    if not term or not term.strip():
        return True
    return term.strip().lower() in (text or "").lower()


def filter_articles(
    articles: list[dict],
    category=None,
    subcategory: str | None = None,
    popular: bool = False,
    search: str | None = None,
) -> list[dict]:
    """Filter *articles* for a category view, preserving input order.

    ``category`` may be a Category, its name, ``HOME`` or None (no
    category filter). A subcategory of None or ``"ALL"`` keeps every
    subcategory. ``popular=True`` keeps only articles flagged popular for
    the category (the global flag for ``HOME``).
    """
    cat = None
    if category is not None and category != HOME:
        cat = Category.parse(category)
    sub = None if subcategory in (None, "", ALL_SUBCATEGORIES) else subcategory

    result = []
    for article in articles:
        if cat is not None and article.get("category") != cat.value:
            continue
        if sub is not None and article.get("subcategory") != sub:
            continue
        if popular and not is_popular_in(article, cat if cat is not None else HOME):
            continue
        if not _matches_search(article.get("title"), search):
            continue
        result.append(article)
    return result


def sort_products(products: list[dict], sort: str = SORT_DEFAULT) -> list[dict]:
    """Stable price sort; ``default`` keeps fetch (recency) order."""
    if sort == SORT_PRICE_ASC:
        return sorted(products, key=lambda p: p.get("price") or 0)
    if sort == SORT_PRICE_DESC:
        return sorted(products, key=lambda p: p.get("price") or 0, reverse=True)
    if sort != SORT_DEFAULT:
        raise ValueError(f"Unknown sort key: {sort!r}")
    return list(products)


def filter_products(
    products: list[dict],
    search: str | None = None,
    brand: str | None = None,
    sort: str = SORT_DEFAULT,
) -> list[dict]:
    """Name search + exact brand match, then sort."""
    selected = [
        p for p in products
        if _matches_search(p.get("name"), search)
        and (brand in (None, "", ALL_BRANDS) or p.get("brand") == brand)
    ]
    return sort_products(selected, sort)


def unique_brands(products: list[dict]) -> list[str]:
    return sorted({p["brand"] for p in products if p.get("brand")})


def home_sections(blogs: list[dict]) -> dict[str, list[dict]]:
    """Split the landing-page blog list (newest first) into its sections."""
    return {
        "featured": [b for b in blogs if b.get("featured")][:MAX_HOME_FEATURED],
        "tech_deals": filter_articles(blogs, Category.TECH, "Tech Deals"),
        "popular": filter_articles(blogs, HOME, popular=True),
        "recent": blogs[:ARTICLE_PAGE_SIZE],
    }


def category_hero(featured: list[dict]) -> tuple[dict | None, list[dict]]:
    """Main featured article plus the two articles shown beside it."""
    if not featured:
        return None, []
    return featured[0], featured[1:3]


def group_variants(products: list[dict]) -> dict[tuple[str, str], list[dict]]:
    """Group products into variant families keyed by (name, brand)."""
    families: dict[tuple[str, str], list[dict]] = {}
    for product in products:
        key = ((product.get("name") or "").strip().lower(), (product.get("brand") or "").strip().lower())
        families.setdefault(key, []).append(product)
    return families
