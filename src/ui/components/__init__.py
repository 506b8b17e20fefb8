"""Reusable UI components."""
from src.ui.components.stats_card import rating_summary_card
from src.ui.components.helpers import article_card, product_card, mobile_card, star_row

__all__ = ["rating_summary_card", "article_card", "product_card", "mobile_card", "star_row"]
