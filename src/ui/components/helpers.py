"""Shared UI helper functions and design tokens for articles and products."""

from nicegui import ui

from src.services.comparison import format_price


# ─── Design Tokens ────────────────────────────────────────────────────────────

CARD_CLASSES = "w-full p-5"
INPUT_PROPS = "outlined dense"
HOVER_BG = "hover:bg-[#F1F5F9]"
GRID_CLASSES = "w-full grid grid-cols-1 sm:grid-cols-2 lg:grid-cols-3 gap-4"

# Category badge colors
CATEGORY_COLORS = {
    "GAMES": "deep-purple",
    "TECH": "blue",
    "ENTERTAINMENT": "pink",
    "GADGETS": "teal",
    "STOCKS": "green",
}

PLACEHOLDER_IMAGE = "https://placehold.co/600x400?text=No+image"


def page_header(title: str, subtitle: str | None = None, icon: str | None = None):
    """Render a consistent page title with optional icon + subtitle."""
    with ui.row().classes("items-center gap-3"):
        if icon:
            ui.icon(icon, size="sm").classes("text-accent")
        ui.label(title).classes("text-h5 font-bold")
    if subtitle:
        ui.label(subtitle).classes("text-body2 text-secondary")


def section_header(title: str, icon: str | None = None, subtitle: str | None = None):
    """Render a consistent card section header with accent-colored icon."""
    with ui.row().classes("items-center gap-2 mb-2"):
        if icon:
            ui.icon(icon).classes("text-accent")
        ui.label(title).classes("text-subtitle1 font-bold")
    if subtitle:
        ui.label(subtitle).classes("text-caption text-secondary")


def excerpt(text: str | None, length: int = 140) -> str:
    text = " ".join((text or "").split())
    return text if len(text) <= length else text[:length].rstrip() + "..."


def article_card(article: dict, compact: bool = False) -> None:
    """Render an article teaser linking to its detail page."""
    href = f"/article/{article.get('slug')}"
    with ui.link(target=href).classes("no-underline text-inherit w-full"):
        with ui.card().classes(f"w-full {HOVER_BG} cursor-pointer").props("flat bordered"):
            if not compact:
                ui.image(article.get("image_url") or PLACEHOLDER_IMAGE).classes("w-full h-40 object-cover")
            with ui.column().classes("gap-1 p-2"):
                category = article.get("category") or ""
                if category:
                    ui.badge(category, color=CATEGORY_COLORS.get(category, "grey")).props("rounded")
                ui.label(article.get("title") or "Untitled").classes("text-subtitle1 font-bold")
                if not compact:
                    ui.label(excerpt(article.get("content"))).classes("text-body2 text-secondary")


def mobile_card(card: dict) -> None:
    """Render a mobile product teaser; ``card`` is an article-shaped dict."""
    with ui.link(target=f"/product/{card.get('slug')}?type=mobile").classes("no-underline text-inherit"):
        with ui.card().classes(f"w-56 {HOVER_BG} cursor-pointer").props("flat bordered"):
            ui.image(card.get("image_url") or PLACEHOLDER_IMAGE).classes("w-full h-40 object-contain")
            ui.label(card.get("title") or "").classes("text-subtitle2 font-bold")
            ui.label(card.get("content") or "").classes("text-caption text-secondary")


def product_card(product: dict, kind: str) -> None:
    with ui.link(target=f"/product/{product['id']}?type={kind}").classes("no-underline text-inherit w-full"):
        with ui.card().classes(f"w-full {HOVER_BG} cursor-pointer").props("flat bordered"):
            ui.image(product.get("image_url") or PLACEHOLDER_IMAGE).classes("w-full h-44 object-contain")
            ui.label(product.get("name") or "").classes("text-subtitle1 font-bold")
            ui.label(product.get("brand") or "").classes("text-caption text-secondary")
            ui.label(format_price(product.get("price"))).classes("text-subtitle2 text-primary")


def star_row(value: float, size: str = "sm") -> None:
    """Render five stars, filling the first *value* (rounded)."""
    filled = int(round(value or 0))
    with ui.row().classes("gap-0"):
        for i in range(1, 6):
            ui.icon("star" if i <= filled else "star_border", size=size).classes("text-amber-6")
