"""Expert reviews: one editorial verdict per product."""
import logging

from src.services.errors import ValidationError
from src.services.gateway import DataGateway, Query
from src.services.utils import text_or_none

logger = logging.getLogger(__name__)

MIN_EXPERT_RATING = 0
MAX_EXPERT_RATING = 10


def _clean_points(values) -> list[str]:
    if isinstance(values, str):
        values = values.splitlines()
    return [v.strip() for v in (values or []) if v and str(v).strip()]


def validate_expert_review(data: dict) -> dict:
    errors: dict[str, str] = {}

    rating = data.get("rating")
    try:
        rating = float(rating)
    except (TypeError, ValueError):
        errors["rating"] = "Rating must be a number"
    else:
        if not MIN_EXPERT_RATING <= rating <= MAX_EXPERT_RATING:
            errors["rating"] = f"Rating must be between {MIN_EXPERT_RATING} and {MAX_EXPERT_RATING}"

    cleaned = {"rating": rating}
    for name in ("author", "summary", "verdict"):
        cleaned[name] = text_or_none(data.get(name))
        if not cleaned[name]:
            errors[name] = f"{name.capitalize()} is required"

    cleaned["pros"] = _clean_points(data.get("pros"))
    cleaned["cons"] = _clean_points(data.get("cons"))
    if not cleaned["pros"]:
        errors["pros"] = "At least one pro is required"
    if not cleaned["cons"]:
        errors["cons"] = "At least one con is required"

    if errors:
        raise ValidationError(errors)
    return cleaned


class ExpertReviewService:
    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    def get(self, product_id: str) -> dict | None:
        """The product's expert review, or None when it has none."""
        return self.gateway.fetch_one("expert_reviews", Query().eq("product_id", product_id))

    def create(self, product_id: str, data: dict) -> dict:
        cleaned = validate_expert_review(data)
        cleaned["product_id"] = product_id
        review = self.gateway.insert("expert_reviews", cleaned)
        logger.info("Added expert review %s for product %s", review["id"], product_id)
        return review
