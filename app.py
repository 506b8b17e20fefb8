"""Gadget Press - Main entry point."""
import logging

from nicegui import app, ui

from config import APP_TITLE, APP_PORT, APP_HOST, BACKEND_URL, IMAGES_DIR, LOG_FORMAT, LOG_LEVEL
from src.models import init_db
from src.ui.pages.home import home_page
from src.ui.pages.category import category_page
from src.ui.pages.article import article_page
from src.ui.pages.products import products_page
from src.ui.pages.product_detail import product_detail_page
from src.ui.pages.comparison import comparison_page
from src.ui.pages.admin import admin_page

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

# Local tables are only needed when no hosted backend is configured
if not BACKEND_URL:
    init_db()

# Serve locally-saved product and article images
app.add_static_files("/images", str(IMAGES_DIR))


@ui.page("/")
def index():
    home_page()


@ui.page("/category/{name}")
def category_view(name: str, subcategory: str | None = None):
    category_page(name, subcategory=subcategory)


@ui.page("/article/{slug}")
def article_view(slug: str):
    article_page(slug)


@ui.page("/products/{kind}")
def products_view(kind: str):
    products_page(kind)


@ui.page("/product/{product_id}")
def product_detail_view(product_id: str, type: str = "mobile"):
    product_detail_page(product_id, kind=type)


@ui.page("/comparison")
def comparison_view(type: str = "mobile", ids: str = ""):
    comparison_page(kind=type, ids=ids)


@ui.page("/admin")
def admin_view():
    admin_page()


@app.get("/_health")
async def health_check():
    return {"status": "ok", "app": "gadgetpress"}


logger.info("Starting %s on %s:%s", APP_TITLE, APP_HOST, APP_PORT)
ui.run(
    title=APP_TITLE,
    host=APP_HOST,
    port=APP_PORT,
    reload=False,
    dark=False,
)
