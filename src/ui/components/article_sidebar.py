"""Sidebar with category tabs and a "Load more" article list."""
import logging

from nicegui import ui

from src.models.category import SIDEBAR_CATEGORIES
from src.services.articles import ArticleService
from src.services.errors import GatewayError
from src.ui.components.helpers import article_card

logger = logging.getLogger(__name__)


def article_sidebar(service: ArticleService):
    """Render the tabbed sidebar. Switching tabs resets the listing."""
    acc = service.sidebar(SIDEBAR_CATEGORIES[0])

    with ui.card().classes("w-full p-4").props("flat bordered"):
        with ui.tabs().classes("w-full").props("dense") as tabs:
            for category in SIDEBAR_CATEGORIES:
                ui.tab(category.value, label=category.value.title())
        tabs.value = SIDEBAR_CATEGORIES[0].value

        @ui.refreshable
        def _list():
            for article in acc.items:
                article_card(article, compact=True)
            if not acc.items and not acc.has_more:
                ui.label("No articles yet").classes("text-caption text-secondary")
            if acc.has_more:
                ui.button("Load more", on_click=_load_more).props("flat dense").classes("w-full")

        async def _load_more():
            try:
                page = await acc.load_next_async()
            except GatewayError as exc:
                logger.error("Sidebar page failed: %s", exc)
                ui.notify("Could not load articles", type="negative")
                return
            if page is not None:
                _list.refresh()

        async def _switch(e):
            acc.reset(service.sidebar_query(e.value))
            _list.refresh()
            await _load_more()

        tabs.on_value_change(_switch)
        _list()
        ui.timer(0.05, _load_more, once=True)
