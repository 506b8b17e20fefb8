"""Product listing page with search, brand filter, price sort and Load More."""
import asyncio
import logging

from nicegui import ui

from src.models.product import ProductKind
from src.services.catalog import CatalogService
from src.services.errors import GatewayError
from src.services.gateway import get_gateway
from src.services.listing_filter import ALL_BRANDS, SORT_DEFAULT, SORT_OPTIONS, filter_products
from src.ui.components.helpers import GRID_CLASSES, INPUT_PROPS, page_header, product_card
from src.ui.layout import build_layout

logger = logging.getLogger(__name__)


def products_page(kind: str = "mobile"):
    """Render the product listing for one product kind."""
    try:
        kind = ProductKind.parse(kind)
    except ValueError:
        ui.navigate.to("/products/mobile")
        return

    content = build_layout()
    catalog = CatalogService(get_gateway())
    acc = catalog.listing(kind)
    filters = {"search": "", "brand": ALL_BRANDS, "sort": SORT_DEFAULT}

    with content:
        page_header(f"{kind.label}s", icon="devices")
        with ui.row().classes("items-center gap-4 w-full"):
            ui.input(
                placeholder="Search by name...",
                on_change=lambda e: _set("search", e.value or ""),
            ).classes("w-64").props(INPUT_PROPS)
            brand_select = ui.select(
                {ALL_BRANDS: "All brands"}, value=ALL_BRANDS,
                on_change=lambda e: _set("brand", e.value),
            ).classes("w-48").props(INPUT_PROPS)
            ui.select(
                SORT_OPTIONS, value=SORT_DEFAULT,
                on_change=lambda e: _set("sort", e.value),
            ).classes("w-56").props(INPUT_PROPS)

        @ui.refreshable
        def _grid():
            shown = filter_products(acc.items, filters["search"], filters["brand"], filters["sort"])
            if not shown and not acc.has_more:
                ui.label("No products found.").classes("text-secondary")
            with ui.element("div").classes(GRID_CLASSES):
                for product in shown:
                    product_card(product, kind.value)
            if acc.has_more:
                ui.button("Load more", on_click=_more).props("outline")

        _grid()

    def _set(key: str, value):
        filters[key] = value
        _grid.refresh()

    async def _more():
        try:
            page = await acc.load_next_async()
        except GatewayError as exc:
            logger.error("Product page failed for %s: %s", kind.value, exc)
            ui.notify("Could not load products", type="negative")
            return
        if page is not None:
            _grid.refresh()

    async def _load_brands():
        try:
            brands = await asyncio.get_event_loop().run_in_executor(None, catalog.brands, kind)
        except GatewayError as exc:
            logger.warning("Brand list failed for %s: %s", kind.value, exc)
            return
        options = {ALL_BRANDS: "All brands"}
        options.update({b: b for b in brands})
        brand_select.set_options(options, value=filters["brand"])

    ui.timer(0.05, _more, once=True)
    ui.timer(0.05, _load_brands, once=True)
