"""Category listing page with subcategory chips and featured hero."""
import logging

from nicegui import ui

from src.models.category import ALL_SUBCATEGORIES, Category, subcategories_for
from src.services.articles import ArticleService
from src.services.errors import GatewayError
from src.services.gateway import get_gateway
from src.services.pagination import LatestRequest
from src.ui.components.helpers import GRID_CLASSES, article_card, page_header, section_header
from src.ui.layout import build_layout

logger = logging.getLogger(__name__)


def category_page(name: str, subcategory: str | None = None):
    """Render one category. Unknown names go back to the home page."""
    try:
        category = Category.parse(name)
    except ValueError:
        logger.warning("Unknown category requested: %s", name)
        ui.navigate.to("/")
        return

    content = build_layout()
    service = ArticleService(get_gateway())
    loader = LatestRequest(service.category_page)
    state = {"subcategory": subcategory or ALL_SUBCATEGORIES}

    with content:
        page_header(category.value.title(), icon="category")
        options = {ALL_SUBCATEGORIES: "All"}
        options.update({sub: sub for sub in subcategories_for(category)})
        if state["subcategory"] not in options:
            state["subcategory"] = ALL_SUBCATEGORIES
        ui.toggle(
            options, value=state["subcategory"], on_change=lambda e: _select(e.value),
        ).props("unelevated no-caps")
        body = ui.column().classes("w-full gap-6")

    async def _select(sub: str):
        state["subcategory"] = sub or ALL_SUBCATEGORIES
        await _load()

    async def _load():
        body.clear()
        with body:
            ui.spinner(size="lg")
        try:
            data = await loader.load(category, state["subcategory"])
        except GatewayError as exc:
            logger.exception("Category page load failed for %s", category.value)
            body.clear()
            ui.notify(f"Failed to load {category.value.title()}: {exc}", type="negative")
            return
        if data is None:
            # A newer selection owns the body now
            return
        body.clear()
        with body:
            _render(data)

    ui.timer(0.05, _load, once=True)


def _render(data: dict):
    if data["hero"]:
        with ui.row().classes("w-full gap-4 no-wrap"):
            with ui.column().classes("flex-[2]"):
                article_card(data["hero"])
            with ui.column().classes("flex-1 gap-4"):
                for article in data["hero_grid"]:
                    article_card(article, compact=True)

    if not data["grid"]:
        ui.label("No articles in this section yet.").classes("text-secondary")
        return

    with ui.element("div").classes(GRID_CLASSES):
        for article in data["grid"]:
            article_card(article)

    if data["popular"]:
        section_header("Popular", icon="trending_up")
        with ui.element("div").classes(GRID_CLASSES):
            for article in data["popular"]:
                article_card(article)

    section_header("Recent", icon="schedule")
    with ui.column().classes("w-full gap-2"):
        for article in data["recent"]:
            article_card(article, compact=True)
