"""Rating summary card: average, total and per-star bars."""
from nicegui import ui

from src.services.ratings import RatingStats
from src.ui.components.helpers import star_row


def rating_summary_card(stats: RatingStats):
    """Render the aggregate rating block for a product or article."""
    with ui.card().classes("min-w-[220px] flex-1 p-5").props("flat bordered"):
        with ui.row().classes("items-center gap-4 w-full"):
            with ui.column().classes("items-center gap-0"):
                ui.label(f"{stats.average:.1f}").classes("text-h4 font-bold")
                star_row(stats.average)
                ui.label(f"{stats.total} rating{'s' if stats.total != 1 else ''}").classes(
                    "text-caption text-secondary"
                )
            with ui.column().classes("flex-1 gap-1"):
                # Five-star row first
                for stars in range(5, 0, -1):
                    count = stats.distribution[5 - stars]
                    with ui.row().classes("items-center gap-2 w-full no-wrap"):
                        ui.label(f"{stars}").classes("text-caption w-3")
                        ui.linear_progress(
                            value=stats.share(stars) / 100, show_value=False, color="amber-6",
                        ).classes("flex-1")
                        ui.label(str(count)).classes("text-caption text-secondary w-6")
