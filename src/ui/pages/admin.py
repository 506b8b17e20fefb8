"""Admin panel: article flags and editing, products, expert reviews."""
import asyncio
import logging

from nicegui import ui

from src.models.category import Category, popular_flag_column, subcategories_for
from src.models.product import ProductKind
from src.services.blog_admin import BlogAdmin, group_by_category
from src.services.errors import CapacityExceededError, GatewayError, ValidationError
from src.services.expert_reviews import ExpertReviewService
from src.services.gateway import get_gateway
from src.services.image_store import get_image_store
from src.services.pagination import LatestRequest
from src.services.product_admin import ImageUpload, ProductAdmin, REQUIRED_FIELDS
from src.ui.components.helpers import CARD_CLASSES, INPUT_PROPS, page_header, section_header
from src.ui.layout import build_layout

logger = logging.getLogger(__name__)


def _notify_validation(exc: ValidationError):
    for field_name, message in exc.errors.items():
        ui.notify(f"{field_name}: {message}", type="warning")


def admin_page():
    """Render the admin panel."""
    content = build_layout()
    gateway = get_gateway()
    blogs = BlogAdmin(gateway)
    products = ProductAdmin(gateway, get_image_store())
    reviews = ExpertReviewService(gateway)

    with content:
        page_header("Admin", subtitle="Manage articles and products", icon="admin_panel_settings")
        with ui.tabs().classes("w-full") as tabs:
            blogs_tab = ui.tab("Articles", icon="article")
            products_tab = ui.tab("Products", icon="devices")
        with ui.tab_panels(tabs, value=blogs_tab).classes("w-full"):
            with ui.tab_panel(blogs_tab):
                _blogs_panel(blogs)
            with ui.tab_panel(products_tab):
                _products_panel(products, reviews)


# ----------------------------------------------------------------------
# Articles
# ----------------------------------------------------------------------


def _blogs_panel(admin: BlogAdmin):
    loader = LatestRequest(admin.list_blogs)

    @ui.refreshable
    def _list(blogs: list[dict] | None = None):
        if blogs is None:
            ui.spinner(size="lg")
            return
        for category, items in group_by_category(blogs).items():
            if not items:
                continue
            section_header(category.value.title(), subtitle=f"{len(items)} article(s)")
            for blog in items:
                _blog_row(blog, category)

    async def _reload():
        try:
            blogs = await loader.load()
        except GatewayError as exc:
            logger.exception("Blog list failed")
            ui.notify(f"Failed to load articles: {exc}", type="negative")
            _list.refresh([])
            return
        if blogs is not None:
            _list.refresh(blogs)

    async def _call(fn, *args, success: str | None = None) -> bool:
        """Run an admin action and redraw the list."""
        try:
            await asyncio.get_event_loop().run_in_executor(None, fn, *args)
        except CapacityExceededError as exc:
            ui.notify(str(exc), type="warning")
            return False
        except ValidationError as exc:
            _notify_validation(exc)
            return False
        except GatewayError as exc:
            logger.error("Admin blog action failed: %s", exc)
            ui.notify(f"Action failed: {exc}", type="negative")
            return False
        finally:
            await _reload()
        if success:
            ui.notify(success, type="positive")
        return True

    def _blog_row(blog: dict, category: Category):
        flag = popular_flag_column(category)
        with ui.row().classes("items-center gap-3 w-full py-1"):
            ui.label(blog["title"]).classes("text-body1 flex-1")
            ui.checkbox(
                "Featured", value=bool(blog.get("featured")),
                on_change=lambda e, b=blog: _call(admin.toggle_featured, b["id"], not e.value),
            )
            ui.checkbox(
                "Featured in category", value=bool(blog.get("featured_in_category")),
                on_change=lambda e, b=blog: _call(
                    admin.toggle_category_featured, b["id"], not e.value, b["category"],
                ),
            )
            ui.checkbox(
                "Popular", value=bool(blog.get("popular")),
                on_change=lambda e, b=blog: _call(admin.toggle_popular, b["id"], not e.value),
            )
            ui.checkbox(
                f"Popular in {category.value.title()}", value=bool(blog.get(flag)),
                on_change=lambda e, b=blog: _call(admin.toggle_category_popular, b["id"], not e.value),
            )
            ui.button(icon="edit", on_click=lambda b=blog: _editor(b)).props("flat round dense")
            ui.button(
                icon="delete", on_click=lambda b=blog: _call(admin.delete, b["id"], success="Article deleted"),
            ).props("flat round dense color=negative")

    def _editor(blog: dict | None = None):
        blog = blog or {}
        with ui.dialog() as dlg, ui.card().classes("w-[640px]"):
            ui.label("Edit article" if blog else "New article").classes("text-subtitle1 font-bold")
            title = ui.input("Title", value=blog.get("title", "")).classes("w-full").props(INPUT_PROPS)
            author = ui.input("Author", value=blog.get("author") or "").classes("w-full").props(INPUT_PROPS)
            category = ui.select(
                [c.value for c in Category], label="Category",
                value=blog.get("category") or Category.TECH.value,
            ).classes("w-full").props(INPUT_PROPS)
            subcategory = ui.select(
                list(subcategories_for(category.value)), label="Subcategory",
                value=blog.get("subcategory"), clearable=True,
            ).classes("w-full").props(INPUT_PROPS)
            category.on_value_change(
                lambda e: subcategory.set_options(list(subcategories_for(e.value)), value=None)
            )
            image_url = ui.input("Image URL", value=blog.get("image_url") or "").classes("w-full").props(INPUT_PROPS)
            body = ui.textarea("Content (markdown)", value=blog.get("content", "")).classes("w-full").props(INPUT_PROPS)

            async def _save():
                data = {
                    "title": title.value, "author": author.value, "category": category.value,
                    "subcategory": subcategory.value, "image_url": image_url.value, "content": body.value,
                }
                if blog.get("id"):
                    saved = await _call(admin.update, blog["id"], data, success="Article updated")
                else:
                    saved = await _call(admin.create, data, success="Article created")
                if saved:
                    dlg.close()

            with ui.row().classes("justify-end gap-2 w-full"):
                ui.button("Cancel", on_click=dlg.close).props("flat")
                ui.button("Save", on_click=_save)
        dlg.open()

    ui.button("New article", icon="add", on_click=lambda: _editor()).props("unelevated")
    _list()
    ui.timer(0.05, _reload, once=True)


# ----------------------------------------------------------------------
# Products
# ----------------------------------------------------------------------


def _products_panel(admin: ProductAdmin, reviews: ExpertReviewService):
    state = {"kind": ProductKind.MOBILE}
    loader = LatestRequest(admin.list_products)

    @ui.refreshable
    def _list(items: list[dict] | None = None):
        if items is None:
            ui.spinner(size="lg")
            return
        for product in items:
            with ui.row().classes("items-center gap-3 w-full py-1"):
                ui.label(f"{product['brand']} {product['name']}").classes("text-body1 flex-1")
                ui.button(icon="edit", on_click=lambda p=product: _editor(p)).props("flat round dense")
                ui.button(icon="reviews", on_click=lambda p=product: _review_editor(p)).props("flat round dense")
                ui.button(icon="delete", on_click=lambda p=product: _delete(p)).props(
                    "flat round dense color=negative"
                )

    async def _reload():
        try:
            items = await loader.load(state["kind"])
        except GatewayError as exc:
            logger.exception("Product list failed")
            ui.notify(f"Failed to load products: {exc}", type="negative")
            _list.refresh([])
            return
        if items is not None:
            _list.refresh(items)

    async def _switch(kind: ProductKind):
        state["kind"] = kind
        _list.refresh()
        await _reload()

    async def _delete(product: dict):
        try:
            await asyncio.get_event_loop().run_in_executor(None, admin.delete, state["kind"], product["id"])
        except GatewayError as exc:
            ui.notify(f"Delete failed: {exc}", type="negative")
            return
        ui.notify("Product deleted", type="positive")
        await _reload()

    def _editor(product: dict | None = None):
        kind = state["kind"]
        product = dict(product or {})
        gallery = list(product.get("gallery_images") or [])
        pending = {"main": None, "gallery": []}
        fields = list(REQUIRED_FIELDS) + ["model_name", "os", "color"]
        fields += ["camera", "chipset", "charging_specs"] if kind is ProductKind.MOBILE else ["graphics", "ports"]

        with ui.dialog() as dlg, ui.card().classes("w-[720px]"):
            ui.label(f"{'Edit' if product else 'New'} {kind.label.lower()}").classes("text-subtitle1 font-bold")
            inputs = {}
            with ui.grid(columns=2).classes("w-full gap-2"):
                for name in fields:
                    inputs[name] = ui.input(
                        name.replace("_", " ").title(), value=product.get(name) or "",
                    ).props(INPUT_PROPS)
                inputs["price"] = ui.number("Price", value=product.get("price") or 0, min=0).props(INPUT_PROPS)

            ui.label("Main image").classes("text-caption")
            ui.upload(
                on_upload=lambda e: pending.update(main=ImageUpload(e.content.read(), e.name)),
                auto_upload=True, max_files=1,
            ).props("accept=image/* flat bordered").classes("w-full")

            ui.label("Gallery").classes("text-caption")

            @ui.refreshable
            def _gallery():
                with ui.row().classes("gap-2"):
                    for i, url in enumerate(gallery):
                        with ui.column().classes("items-center gap-0"):
                            ui.image(url).classes("w-16 h-16 object-cover rounded")
                            ui.button(icon="close", on_click=lambda idx=i: _remove(idx)).props("flat dense round size=sm")

            def _remove(index: int):
                gallery[:] = admin.remove_gallery_image(gallery, index)
                _gallery.refresh()

            _gallery()
            ui.upload(
                on_upload=lambda e: pending["gallery"].append(ImageUpload(e.content.read(), e.name)),
                auto_upload=True, multiple=True,
            ).props("accept=image/* flat bordered").classes("w-full")

            async def _save():
                data = {name: widget.value for name, widget in inputs.items()}
                data["image_url"] = product.get("image_url")
                data["gallery_images"] = gallery
                try:
                    outcome = await asyncio.get_event_loop().run_in_executor(
                        None, lambda: admin.save(
                            kind, data, product.get("id"), pending["main"], pending["gallery"],
                        ),
                    )
                except ValidationError as exc:
                    _notify_validation(exc)
                    return
                if not outcome.ok:
                    ui.notify(
                        f"Save failed at {outcome.failed_step}: {outcome.error}", type="negative",
                    )
                    return
                ui.notify(f"{kind.label} {'updated' if product else 'added'} successfully", type="positive")
                dlg.close()
                await _reload()

            with ui.row().classes("justify-end gap-2 w-full"):
                ui.button("Cancel", on_click=dlg.close).props("flat")
                ui.button("Save", on_click=_save)
        dlg.open()

    def _review_editor(product: dict):
        with ui.dialog() as dlg, ui.card().classes("w-[560px]"):
            ui.label(f"Expert review: {product['name']}").classes("text-subtitle1 font-bold")
            rating = ui.number("Rating (0-10)", value=8, min=0, max=10, step=0.1).props(INPUT_PROPS)
            author = ui.input("Author").classes("w-full").props(INPUT_PROPS)
            summary = ui.textarea("Summary").classes("w-full").props(INPUT_PROPS)
            pros = ui.textarea("Pros (one per line)").classes("w-full").props(INPUT_PROPS)
            cons = ui.textarea("Cons (one per line)").classes("w-full").props(INPUT_PROPS)
            verdict = ui.textarea("Verdict").classes("w-full").props(INPUT_PROPS)

            async def _save():
                data = {
                    "rating": rating.value, "author": author.value, "summary": summary.value,
                    "pros": pros.value, "cons": cons.value, "verdict": verdict.value,
                }
                try:
                    await asyncio.get_event_loop().run_in_executor(None, reviews.create, product["id"], data)
                except ValidationError as exc:
                    _notify_validation(exc)
                    return
                except GatewayError as exc:
                    ui.notify(f"Failed to save review: {exc}", type="negative")
                    return
                ui.notify("Expert review added successfully", type="positive")
                dlg.close()

            with ui.row().classes("justify-end gap-2 w-full"):
                ui.button("Cancel", on_click=dlg.close).props("flat")
                ui.button("Save", on_click=_save)
        dlg.open()

    with ui.card().classes(CARD_CLASSES):
        with ui.row().classes("items-center gap-4"):
            ui.toggle(
                {ProductKind.MOBILE: "Mobiles", ProductKind.LAPTOP: "Laptops"},
                value=ProductKind.MOBILE,
                on_change=lambda e: _switch(e.value),
            )
            ui.button("New product", icon="add", on_click=lambda: _editor()).props("unelevated")
        _list()
        ui.timer(0.05, _reload, once=True)
