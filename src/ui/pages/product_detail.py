"""Product detail page: gallery, specs, expert review, ratings and compare picker."""
import asyncio
import logging
from urllib.parse import quote

from nicegui import ui

from src.models.product import ProductKind
from src.services.catalog import CatalogService
from src.services.comparison import ComparisonSelector, format_price, format_spec, spec_fields
from src.services.errors import CapacityExceededError, GatewayError, NotFoundError, ValidationError
from src.services.expert_reviews import ExpertReviewService
from src.services.gateway import get_gateway
from src.services.ratings import FormState, RatingForm, RatingService
from src.ui.components.helpers import CARD_CLASSES, PLACEHOLDER_IMAGE, section_header, star_row
from src.ui.components.stats_card import rating_summary_card
from src.ui.layout import build_layout

logger = logging.getLogger(__name__)


def product_detail_page(product_id: str, kind: str = "mobile"):
    """Render the product detail page."""
    try:
        kind = ProductKind.parse(kind)
    except ValueError:
        kind = ProductKind.MOBILE

    content = build_layout()
    gateway = get_gateway()
    catalog = CatalogService(gateway)

    with content:
        body = ui.column().classes("w-full gap-6")
        with body:
            spinner = ui.spinner(size="lg")

    async def _load():
        loop = asyncio.get_event_loop()
        try:
            product = await loop.run_in_executor(None, catalog.get_product, kind, product_id)
            variants = await loop.run_in_executor(None, catalog.variants, kind, product)
        except NotFoundError:
            ui.notify("Product not found", type="warning")
            ui.navigate.to("/")
            return
        except GatewayError as exc:
            logger.exception("Product load failed for %s", product_id)
            spinner.delete()
            ui.notify(f"Failed to load product: {exc}", type="negative")
            return
        spinner.delete()
        with body:
            _header(product, kind, variants)
            _specs(product, kind)
            review_slot = ui.column().classes("w-full")
            _ratings(RatingService(gateway), product_id)
            _compare_section(catalog, product, kind)
        await _expert_review(review_slot, ExpertReviewService(gateway), product_id)

    ui.timer(0.05, _load, once=True)


def _header(product: dict, kind: ProductKind, variants: list[dict]):
    with ui.row().classes("w-full gap-6 no-wrap items-start"):
        with ui.column().classes("w-96 gap-2"):
            images = [product.get("image_url")] + list(product.get("gallery_images") or [])
            images = [img for img in images if img] or [PLACEHOLDER_IMAGE]
            main_image = ui.image(images[0]).classes("w-full h-80 object-contain rounded-lg")
            if len(images) > 1:
                with ui.row().classes("gap-2"):
                    for img in images:
                        ui.image(img).classes("w-16 h-16 object-cover rounded cursor-pointer").on(
                            "click", lambda _, src=img: main_image.set_source(src)
                        )
        with ui.column().classes("flex-1 gap-2"):
            ui.label(kind.label).classes("text-caption text-secondary")
            ui.label(product["name"]).classes("text-h4 font-bold")
            ui.label(product.get("brand") or "").classes("text-subtitle1 text-secondary")
            ui.label(format_price(product.get("price"))).classes("text-h5 text-primary")
            if variants:
                ui.label("Other variants").classes("text-subtitle2 mt-2")
                with ui.row().classes("gap-2"):
                    for variant in variants:
                        label = " / ".join(v for v in (variant.get("ram"), variant.get("storage")) if v)
                        ui.button(
                            f"{label or variant.get('model_name') or 'Variant'} - {format_price(variant.get('price'))}",
                            on_click=lambda v=variant: ui.navigate.to(f"/product/{v['id']}?type={kind.value}"),
                        ).props("outline dense no-caps")


def _specs(product: dict, kind: ProductKind):
    with ui.card().classes(CARD_CLASSES):
        section_header("Specifications", icon="list_alt")
        rows = [
            {"label": label, "value": format_spec(field, product.get(field))}
            for label, field in spec_fields(kind)
        ]
        ui.table(
            columns=[
                {"name": "label", "label": "", "field": "label", "align": "left"},
                {"name": "value", "label": "", "field": "value", "align": "left"},
            ],
            rows=rows,
            row_key="label",
        ).classes("w-full").props("flat dense hide-header")

        for group in ("display_details", "performance_specs", "design_specs", "multimedia_specs"):
            details = product.get(group)
            if isinstance(details, dict) and details:
                with ui.expansion(group.replace("_", " ").title()).classes("w-full"):
                    for key, value in details.items():
                        with ui.row().classes("gap-2"):
                            ui.label(str(key).replace("_", " ").title()).classes("text-body2 font-medium w-48")
                            ui.label(str(value)).classes("text-body2 text-secondary")


async def _expert_review(container, service: ExpertReviewService, product_id: str):
    try:
        review = await asyncio.get_event_loop().run_in_executor(None, service.get, product_id)
    except GatewayError as exc:
        logger.error("Expert review load failed for %s: %s", product_id, exc)
        return
    if not review:
        return
    with container, ui.card().classes(CARD_CLASSES):
        section_header("Expert Review", icon="workspace_premium")
        with ui.row().classes("items-center gap-3"):
            ui.label(f"{review['rating']:.1f}/10").classes("text-h5 font-bold text-primary")
            ui.label(f"by {review['author']}").classes("text-caption text-secondary")
        ui.label(review["summary"]).classes("text-body1")
        with ui.row().classes("w-full gap-6"):
            with ui.column().classes("flex-1"):
                ui.label("Pros").classes("text-subtitle2 text-positive")
                for pro in review.get("pros") or []:
                    ui.label(f"+ {pro}").classes("text-body2")
            with ui.column().classes("flex-1"):
                ui.label("Cons").classes("text-subtitle2 text-negative")
                for con in review.get("cons") or []:
                    ui.label(f"- {con}").classes("text-body2")
        ui.label("Verdict").classes("text-subtitle2 mt-2")
        ui.label(review["verdict"]).classes("text-body1")


def _ratings(service: RatingService, product_id: str):
    form = RatingForm()

    with ui.card().classes(CARD_CLASSES):
        section_header("Ratings & Reviews", icon="reviews")

        @ui.refreshable
        def _summary(stats=None, reviews=(), failed: bool = False):
            if failed:
                ui.label("Ratings are unavailable right now.").classes("text-secondary")
                return
            if stats is None:
                ui.spinner(size="md")
                return
            rating_summary_card(stats)
            for review in reviews:
                with ui.column().classes("gap-0 py-2"):
                    with ui.row().classes("items-center gap-2"):
                        star_row(review["rating"], size="xs")
                        ui.label(review.get("user_name") or "Anonymous").classes("text-caption")
                    ui.label(review["review_text"]).classes("text-body2")

        async def _load_summary():
            loop = asyncio.get_event_loop()
            try:
                stats = await loop.run_in_executor(None, service.get_stats, product_id)
                reviews = await loop.run_in_executor(None, service.list_reviews, product_id)
            except GatewayError as exc:
                logger.error("Ratings load failed for %s: %s", product_id, exc)
                _summary.refresh(failed=True)
                return
            _summary.refresh(stats, reviews)

        @ui.refreshable
        def _form():
            with ui.row().classes("gap-0"):
                for stars in range(1, 6):
                    icon = "star" if stars <= form.selected_rating else "star_border"
                    ui.button(icon=icon, on_click=lambda s=stars: _pick(s)).props(
                        "flat round dense color=amber-6"
                    )
            text = ui.textarea("Write a review (optional)", value=form.review_text).classes("w-full")
            text.on_value_change(lambda e: setattr(form, "review_text", e.value or ""))
            submit = ui.button("Submit", on_click=_submit)
            if form.state is FormState.SUBMITTING:
                submit.disable()

        def _pick(stars: int):
            form.selected_rating = stars
            _form.refresh()

        async def _submit():
            try:
                form.begin()
            except ValidationError as exc:
                ui.notify(exc.errors.get("rating", str(exc)), type="warning")
                return
            except RuntimeError:
                return
            _form.refresh()
            try:
                result = await asyncio.get_event_loop().run_in_executor(
                    None, service.submit, product_id, form.selected_rating, form.review_text,
                )
            except Exception:
                logger.exception("Rating submit failed for %s", product_id)
                form.fail()
            else:
                form.finish(result)
            if form.state is FormState.SUCCESS:
                ui.notify("Thank you for your feedback!", type="positive")
            elif form.last_result and form.last_result.partial:
                ui.notify("Your rating was saved, but the review could not be posted.", type="warning")
            else:
                ui.notify("Failed to submit rating. Please try again.", type="negative")
            form.acknowledge()
            _form.refresh()
            await _load_summary()

        _summary()
        ui.separator()
        _form()
        ui.timer(0.05, _load_summary, once=True)


def _compare_section(catalog: CatalogService, product: dict, kind: ProductKind):
    selector = ComparisonSelector(product)

    with ui.card().classes(CARD_CLASSES):
        section_header("Compare", icon="compare_arrows",
                       subtitle=f"Pick up to {selector.capacity - 1} more to compare")

        @ui.refreshable
        def _chosen():
            with ui.row().classes("gap-2 items-center"):
                for item in selector.products:
                    chip = ui.chip(item["name"], removable=item is not selector.anchor)
                    chip.on("remove", lambda _, pid=item["id"]: (selector.remove(pid), _chosen.refresh()))
                ui.button(
                    "Compare",
                    on_click=lambda: ui.navigate.to(
                        f"/comparison?type={kind.value}&ids={quote(','.join(str(p['id']) for p in selector.products))}"
                    ),
                ).props("unelevated").set_enabled(selector.can_compare)

        def _add(candidate: dict):
            try:
                added = selector.add(candidate)
            except CapacityExceededError as exc:
                ui.notify(str(exc), type="warning")
                return
            if not added:
                ui.notify("Already selected", type="info")
            _chosen.refresh()

        def _show(found: list[dict]):
            results.clear()
            with results:
                for candidate in found:
                    with ui.row().classes("items-center gap-2 w-full"):
                        ui.label(candidate["name"]).classes("text-body2 flex-1")
                        ui.label(format_price(candidate.get("price"))).classes("text-caption")
                        ui.button(icon="add", on_click=lambda c=candidate: _add(c)).props("flat dense round")

        async def _search(e=None):
            term = (search.value or "").strip()
            loop = asyncio.get_event_loop()
            try:
                if term:
                    found = await loop.run_in_executor(None, catalog.search, kind, term, product["id"])
                else:
                    found = await loop.run_in_executor(None, catalog.compare_candidates, kind, product["id"])
            except GatewayError as exc:
                logger.error("Compare search failed: %s", exc)
                ui.notify("Search failed", type="negative")
                return
            _show(found)

        _chosen()
        search = ui.input(placeholder=f"Search {kind.label.lower()}s...").classes("w-full").props("dense outlined")
        search.on("keydown.enter", _search)
        results = ui.column().classes("w-full gap-1")
        ui.timer(0.05, _search, once=True)
