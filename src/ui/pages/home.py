"""Landing page: featured, tech deals, popular, recent and newest mobiles."""
import asyncio
import logging

from nicegui import ui

from src.services.articles import ArticleService
from src.services.errors import GatewayError
from src.services.gateway import get_gateway
from src.services.pagination import VisibilityWindow
from src.ui.components.article_sidebar import article_sidebar
from src.ui.components.helpers import GRID_CLASSES, article_card, mobile_card, section_header
from src.ui.layout import build_layout

logger = logging.getLogger(__name__)

SECTIONS = [
    ("featured", "Featured", "star"),
    ("tech_deals", "Tech Deals", "local_offer"),
    ("popular", "Popular", "trending_up"),
    ("recent", "Recent", "schedule"),
]


def home_page():
    """Render the landing page."""
    content = build_layout()
    service = ArticleService(get_gateway())
    window = VisibilityWindow()

    with content:
        with ui.row().classes("w-full gap-6 no-wrap items-start"):
            main = ui.column().classes("flex-1 gap-6")
            with ui.column().classes("w-80 gap-4"):
                article_sidebar(service)

    with main:
        spinner = ui.spinner(size="lg")

    async def _load():
        try:
            sections = await asyncio.get_event_loop().run_in_executor(None, service.landing)
        except GatewayError as exc:
            logger.exception("Landing page load failed")
            spinner.delete()
            with main:
                ui.label("Could not load articles.").classes("text-negative text-h6")
            ui.notify(f"Failed to load content: {exc}", type="negative")
            return
        spinner.delete()
        with main:
            _render_sections(sections, window)

    ui.timer(0.05, _load, once=True)


def _render_sections(sections: dict, window: VisibilityWindow):
    for key, title, icon in SECTIONS:
        articles = sections.get(key) or []
        if not articles:
            continue

        @ui.refreshable
        def _section(key=key, title=title, icon=icon, articles=articles):
            section_header(title, icon=icon)
            with ui.element("div").classes(GRID_CLASSES):
                for article in window.visible(key, articles):
                    article_card(article)
            if window.has_more(key, articles):
                ui.button(
                    "Show more",
                    on_click=lambda k=key: (window.show_more(k), _section.refresh()),
                ).props("flat")

        with ui.column().classes("w-full"):
            _section()

    mobiles = sections.get("mobiles") or []
    if mobiles:
        section_header("Latest Mobiles", icon="smartphone")
        with ui.row().classes("w-full gap-4 overflow-x-auto no-wrap"):
            for card in mobiles:
                mobile_card(card)
