"""Article reads: landing page, category pages, detail, sidebar, search."""
import logging

from config import (
    ARTICLE_PAGE_SIZE, SIDEBAR_PAGE_SIZE, SEARCH_RESULT_LIMIT, HOME_MOBILE_LIMIT,
    LANDING_FETCH_RETRIES, LANDING_FETCH_RETRY_DELAY,
)
from src.models.category import ALL_SUBCATEGORIES, Category
from src.services.errors import GatewayError, NotFoundError
from src.services.gateway import DataGateway, Query
from src.services.listing_filter import category_hero, filter_articles, home_sections
from src.services.pagination import PageAccumulator, collection_accumulator
from src.services.utils import with_retries

logger = logging.getLogger(__name__)


def mobile_as_card(product: dict) -> dict:
    """Present a mobile product with the fields article cards expect."""
    return {
        "title": product.get("name"),
        "content": f"{product.get('processor')} | {product.get('ram')} | {product.get('storage')}",
        "category": Category.GADGETS.value,
        "subcategory": "MOBILE",
        "author": product.get("brand") or "Unknown",
        "image_url": product.get("image_url") or "",
        "slug": product.get("id"),
        "created_at": product.get("created_at"),
        "updated_at": product.get("updated_at"),
    }


class ArticleService:
    """Article queries over the ``blogs`` collection."""

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    # ------------------------------------------------------------------
    # Landing page
    # ------------------------------------------------------------------

    def landing(self) -> dict:
        """Blogs split into home sections plus the newest mobiles.

        These two fetches are the only ones retried.
        """
        blogs = with_retries(
            lambda: self.gateway.fetch("blogs", Query().newest_first()),
            LANDING_FETCH_RETRIES, LANDING_FETCH_RETRY_DELAY, label="Landing blogs fetch",
        )
        mobiles = with_retries(
            lambda: self.gateway.fetch(
                "mobile_products", Query().newest_first().take(HOME_MOBILE_LIMIT)
            ),
            LANDING_FETCH_RETRIES, LANDING_FETCH_RETRY_DELAY, label="Landing mobiles fetch",
        )
        sections = home_sections(blogs)
        sections["mobiles"] = [mobile_as_card(m) for m in mobiles]
        return sections

    # ------------------------------------------------------------------
    # Category pages
    # ------------------------------------------------------------------

    def category_featured(self, category) -> list[dict]:
        cat = Category.parse(category)
        query = (
            Query().eq("category", cat.value).eq("featured_in_category", True).newest_first()
        )
        return self.gateway.fetch("blogs", query)

    def category_articles(self, category, subcategory: str | None = None) -> list[dict]:
        cat = Category.parse(category)
        query = Query().eq("category", cat.value).newest_first()
        if subcategory and subcategory != ALL_SUBCATEGORIES:
            query = query.eq("subcategory", subcategory)
        return self.gateway.fetch("blogs", query)

    def category_page(self, category, subcategory: str | None = None) -> dict:
        """Everything a category listing renders, for one subcategory choice."""
        cat = Category.parse(category)
        articles = self.category_articles(cat, subcategory)
        hero, hero_grid = None, []
        # The hero only shows on the unfiltered view
        if subcategory in (None, "", ALL_SUBCATEGORIES):
            hero, hero_grid = category_hero(self.category_featured(cat))
        return {
            "category": cat,
            "subcategory": subcategory or ALL_SUBCATEGORIES,
            "hero": hero,
            "hero_grid": hero_grid,
            "grid": articles[:4],
            "popular": filter_articles(articles, cat, popular=True),
            "recent": articles[:ARTICLE_PAGE_SIZE],
        }

    # ------------------------------------------------------------------
    # Detail page
    # ------------------------------------------------------------------

    def get_article(self, slug: str, count_view: bool = True) -> dict:
        """Load an article by slug and count the view.

        Raises NotFoundError for an unknown slug. A failed view increment
        is logged and does not block the read.
        """
        article = self.gateway.fetch_one("blogs", Query().eq("slug", slug))
        if article is None:
            raise NotFoundError(f"Article not found: {slug}")
        if count_view:
            try:
                self.gateway.rpc("increment_view_count", {"blog_id": article["id"]})
            except GatewayError as exc:
                logger.warning("View count increment failed for %s: %s", slug, exc)
        return article

    def related(self, article: dict) -> PageAccumulator:
        """Same-category articles, newest first, excluding *article*."""
        query = (
            Query()
            .eq("category", article["category"])
            .where("id", "neq", article["id"])
            .newest_first()
        )
        return collection_accumulator(self.gateway, "blogs", query, ARTICLE_PAGE_SIZE)

    # ------------------------------------------------------------------
    # Sidebar and search
    # ------------------------------------------------------------------

    @staticmethod
    def sidebar_query(category) -> Query:
        return Query().eq("category", Category.parse(category).value).newest_first()

    def sidebar(self, category=Category.TECH) -> PageAccumulator:
        """Sidebar listing; switch tabs with ``acc.reset(sidebar_query(cat))``."""
        return collection_accumulator(
            self.gateway, "blogs", self.sidebar_query(category), SIDEBAR_PAGE_SIZE,
        )

    def search(self, term: str, limit: int = SEARCH_RESULT_LIMIT) -> list[dict]:
        term = (term or "").strip()
        if not term:
            return []
        return self.gateway.fetch("blogs", Query().where("title", "ilike", f"%{term}%").take(limit))
