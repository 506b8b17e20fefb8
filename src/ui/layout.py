"""Shared layout: header with search, sidebar navigation, and content area."""
import asyncio
import logging

from nicegui import ui

from config import APP_TITLE
from src.models.category import Category
from src.services.articles import ArticleService
from src.services.errors import GatewayError
from src.services.gateway import get_gateway
from src.ui.components.helpers import HOVER_BG

logger = logging.getLogger(__name__)

# JavaScript to highlight the current sidebar nav link on page load.
_ACTIVE_NAV_JS = """
(function() {
    var path = window.location.pathname;
    document.querySelectorAll('.q-drawer a[href]').forEach(function(a) {
        var href = a.getAttribute('href');
        var isActive = href === '/' ? path === '/' : path.startsWith(href);
        if (isActive) {
            var row = a.querySelector('.row');
            if (row) {
                row.style.background = '#E2E8F0';
                row.style.borderLeft = '3px solid #0F172A';
            }
        }
    });
})();
"""

NAV_ICONS = {
    Category.GAMES: "sports_esports",
    Category.TECH: "memory",
    Category.ENTERTAINMENT: "movie",
    Category.GADGETS: "smartphone",
    Category.STOCKS: "show_chart",
}


def build_layout(title: str = APP_TITLE):
    """Create the shared page layout with sidebar navigation."""
    ui.colors(
        primary="#0F172A",
        secondary="#475569",
        accent="#F59E0B",
        positive="#16a34a",
        negative="#dc2626",
    )

    with ui.header().classes("items-center justify-between px-4 bg-primary"):
        with ui.link(target="/").classes("no-underline"):
            ui.label(title).classes("text-h6 text-white font-bold")
        ui.space()
        _search_box()

    with ui.left_drawer(value=True).classes("bg-grey-1") as drawer:
        drawer.props("width=240 bordered")
        ui.element("div").classes("h-3")
        _nav_link("Home", "home", "/")
        for category in Category:
            _nav_link(category.value.title(), NAV_ICONS[category], f"/category/{category.value}")
        ui.separator().classes("my-2")
        _nav_link("Admin", "admin_panel_settings", "/admin")

    ui.timer(0.1, lambda: ui.run_javascript(_ACTIVE_NAV_JS), once=True)

    content = ui.column().classes("w-full p-6 max-w-7xl mx-auto gap-4")
    return content


def _search_box():
    """Title search with a small result menu under the input."""
    service = ArticleService(get_gateway())

    with ui.column().classes("relative"):
        search = ui.input(placeholder="Search articles...").classes("w-72").props(
            "dark dense standout='bg-white/10' input-class='text-white' clearable"
        )
        search.props('prepend-inner-icon="search"')
        results = ui.column().classes(
            "absolute top-12 w-72 bg-white shadow-lg rounded z-50 gap-0"
        )
        results.set_visibility(False)

    async def _run_search():
        term = (search.value or "").strip()
        results.clear()
        if not term:
            results.set_visibility(False)
            return
        try:
            found = await asyncio.get_event_loop().run_in_executor(None, service.search, term)
        except GatewayError as exc:
            logger.error("Search failed for %r: %s", term, exc)
            ui.notify("Search failed. Please try again.", type="negative")
            return
        with results:
            if not found:
                ui.label("No articles found").classes("p-2 text-caption text-secondary")
            for article in found:
                with ui.link(target=f"/article/{article['slug']}").classes("no-underline w-full"):
                    ui.label(article["title"]).classes(f"p-2 text-body2 text-primary {HOVER_BG}")
        results.set_visibility(True)

    search.on("keydown.enter", _run_search)
    search.on("clear", lambda: results.set_visibility(False))


def _nav_link(label: str, icon: str, path: str):
    """Render a main sidebar nav item."""
    with ui.link(target=path).classes("no-underline w-full"):
        with ui.row().classes(
            "items-center gap-3 px-4 py-2 rounded-lg w-full "
            f"{HOVER_BG} cursor-pointer"
        ):
            ui.icon(icon).classes("text-secondary")
            ui.label(label).classes("text-body1 text-secondary")
