"""Article category taxonomy.

Categories are a closed set. Each one owns its subcategory list and the
boolean column that marks an article as popular inside that category.
"""
from enum import Enum


class Category(str, Enum):
    GAMES = "GAMES"
    TECH = "TECH"
    ENTERTAINMENT = "ENTERTAINMENT"
    GADGETS = "GADGETS"
    STOCKS = "STOCKS"

    @classmethod
    def parse(cls, value) -> "Category":
        """Accept a Category or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown category: {value!r}") from None


# Pseudo-category for the landing page (uses the global "popular" flag)
HOME = "HOME"

# Subcategory value meaning "no subcategory filter"
ALL_SUBCATEGORIES = "ALL"

SUBCATEGORIES: dict[Category, tuple[str, ...]] = {
    Category.GAMES: ("PC", "PLAYSTATION", "XBOX", "NINTENDO", "MOBILE"),
    Category.TECH: ("Tech Deals", "News"),
    Category.ENTERTAINMENT: ("Movies", "TV Shows", "Music"),
    Category.GADGETS: ("MOBILE", "LAPTOPS"),
    Category.STOCKS: ("Markets", "Crypto", "Analysis"),
}

# Per-category popularity flag. Adding a category means adding a row here
# and the matching column on Blog.
POPULAR_FLAG_COLUMNS: dict[Category, str] = {
    Category.GAMES: "popular_in_games",
    Category.TECH: "popular_in_tech",
    Category.ENTERTAINMENT: "popular_in_entertainment",
    Category.GADGETS: "popular_in_gadgets",
    Category.STOCKS: "popular_in_stocks",
}

# Categories offered as tabs in the sidebar
SIDEBAR_CATEGORIES = (Category.TECH, Category.GAMES, Category.ENTERTAINMENT, Category.STOCKS)


def popular_flag_column(category) -> str:
    """Return the popularity column name for *category*."""
    return POPULAR_FLAG_COLUMNS[Category.parse(category)]


def is_popular_in(record: dict, category) -> bool:
    """True when *record* carries the popularity flag for *category*.

    ``HOME`` reads the global ``popular`` flag.
    """
    if category == HOME:
        return record.get("popular") is True
    return record.get(popular_flag_column(category)) is True


def subcategories_for(category) -> tuple[str, ...]:
    return SUBCATEGORIES[Category.parse(category)]
