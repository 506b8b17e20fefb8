"""Side-by-side comparison of up to three products."""
import asyncio
import logging

from nicegui import ui

from config import MAX_COMPARE
from src.models.product import ProductKind
from src.services.catalog import CatalogService
from src.services.comparison import build_comparison_table
from src.services.errors import GatewayError, NotFoundError
from src.services.gateway import get_gateway
from src.ui.components.helpers import CARD_CLASSES, page_header
from src.ui.layout import build_layout

logger = logging.getLogger(__name__)


def comparison_page(kind: str = "mobile", ids: str = ""):
    try:
        kind = ProductKind.parse(kind)
    except ValueError:
        kind = ProductKind.MOBILE
    product_ids = [pid for pid in (ids or "").split(",") if pid][:MAX_COMPARE]

    content = build_layout()
    catalog = CatalogService(get_gateway())

    with content:
        page_header("Compare", subtitle=f"{kind.label}s side by side", icon="compare_arrows")
        body = ui.column().classes("w-full")

    if len(product_ids) < 2:
        with body:
            ui.label("Pick at least two products to compare.").classes("text-secondary")
        return

    def _fetch_all() -> list[dict]:
        return [catalog.get_product(kind, pid) for pid in product_ids]

    async def _load():
        try:
            products = await asyncio.get_event_loop().run_in_executor(None, _fetch_all)
        except NotFoundError as exc:
            ui.notify(str(exc), type="warning")
            ui.navigate.to("/")
            return
        except GatewayError as exc:
            logger.exception("Comparison load failed")
            ui.notify(f"Failed to load products: {exc}", type="negative")
            return

        table = build_comparison_table(products, kind)
        with body:
            with ui.card().classes(CARD_CLASSES):
                ui.table(
                    columns=table.columns(), rows=table.as_records(), row_key="label",
                ).classes("w-full").props("flat")

    ui.timer(0.05, _load, once=True)
