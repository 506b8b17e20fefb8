"""Article detail page with rating and related articles."""
import asyncio
import logging

from nicegui import ui

from src.services.articles import ArticleService
from src.services.errors import GatewayError, NotFoundError
from src.services.gateway import get_gateway
from src.services.ratings import RatingService
from src.ui.components.helpers import GRID_CLASSES, article_card, section_header, star_row
from src.ui.layout import build_layout

logger = logging.getLogger(__name__)


def article_page(slug: str):
    content = build_layout()
    gateway = get_gateway()
    articles = ArticleService(gateway)
    ratings = RatingService(gateway)

    with content:
        body = ui.column().classes("w-full gap-4 max-w-3xl")
        with body:
            spinner = ui.spinner(size="lg")

    async def _load():
        try:
            article = await asyncio.get_event_loop().run_in_executor(None, articles.get_article, slug)
        except NotFoundError:
            ui.notify("Article not found", type="warning")
            ui.navigate.to("/")
            return
        except GatewayError as exc:
            logger.exception("Article load failed for %s", slug)
            spinner.delete()
            ui.notify(f"Failed to load article: {exc}", type="negative")
            return
        spinner.delete()
        with body:
            _render_article(article)
            _rating_block(ratings, article["id"])
            _related_block(articles, article)

    ui.timer(0.05, _load, once=True)


def _render_article(article: dict):
    ui.badge(article.get("category") or "").props("rounded")
    ui.label(article["title"]).classes("text-h4 font-bold")
    meta = " | ".join(
        part for part in (
            article.get("author"),
            str(article.get("created_at") or "")[:10],
            f"{article.get('view_count') or 0} views",
        ) if part
    )
    ui.label(meta).classes("text-caption text-secondary")
    if article.get("image_url"):
        ui.image(article["image_url"]).classes("w-full rounded-lg")
    ui.markdown(article.get("content") or "").classes("w-full")


def _rating_block(ratings: RatingService, blog_id: str):
    section_header("Rate this article", icon="star")

    @ui.refreshable
    def _summary(stats=None):
        if stats is None:
            return
        with ui.row().classes("items-center gap-2"):
            star_row(stats.average)
            ui.label(f"{stats.average:.1f} ({stats.total})").classes("text-caption text-secondary")

    async def _load_summary():
        try:
            stats = await asyncio.get_event_loop().run_in_executor(None, ratings.article_stats, blog_id)
        except GatewayError as exc:
            logger.error("Article rating load failed for %s: %s", blog_id, exc)
            return
        _summary.refresh(stats)

    _summary()
    ui.timer(0.05, _load_summary, once=True)

    async def _rate(stars: int):
        try:
            await asyncio.get_event_loop().run_in_executor(None, ratings.rate_article, blog_id, stars)
        except GatewayError as exc:
            logger.error("Article rating failed for %s: %s", blog_id, exc)
            ui.notify("Could not save your rating", type="negative")
            return
        ui.notify("Thanks for rating!", type="positive")
        await _load_summary()

    with ui.row().classes("gap-0"):
        for stars in range(1, 6):
            ui.button(icon="star_border", on_click=lambda s=stars: _rate(s)).props("flat round dense")


def _related_block(articles: ArticleService, article: dict):
    acc = articles.related(article)
    section_header("Related articles", icon="article")

    @ui.refreshable
    def _grid():
        with ui.element("div").classes(GRID_CLASSES):
            for item in acc.items:
                article_card(item)
        if acc.has_more:
            ui.button("Load more", on_click=_more).props("flat")

    async def _more():
        try:
            page = await acc.load_next_async()
        except GatewayError as exc:
            logger.error("Related articles failed: %s", exc)
            ui.notify("Could not load related articles", type="negative")
            return
        if page is not None:
            _grid.refresh()

    _grid()
    ui.timer(0.05, _more, once=True)
