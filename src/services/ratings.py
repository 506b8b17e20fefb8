"""Product and article ratings.

Stats are produced by the backend (``calculate_product_rating``); the pure
helpers here define the aggregate shape and back the local SQL store.

Submitting a rating with optional review text is two writes. The rating
goes first; if it fails nothing else is attempted. If the review write
fails afterwards the rating stays recorded and the outcome reports it.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum

from src.services.errors import GatewayError, ValidationError
from src.services.gateway import DataGateway, Query

logger = logging.getLogger(__name__)

STARS = (5, 4, 3, 2, 1)
ANONYMOUS = "Anonymous"


@dataclass
class RatingStats:
    average: float
    total: int
    distribution: list[int]  # index 0 = five-star count

    def to_record(self) -> dict:
        return {
            "average_rating": self.average,
            "total_ratings": self.total,
            "rating_distribution": list(self.distribution),
        }

    @classmethod
    def from_record(cls, data: dict | None) -> "RatingStats":
        if not data:
            return empty_stats()
        return cls(
            average=float(data.get("average_rating") or 0),
            total=int(data.get("total_ratings") or 0),
            distribution=[int(c or 0) for c in (data.get("rating_distribution") or [0] * 5)],
        )

    def share(self, stars: int) -> float:
        """Percentage of ratings with *stars* (0 when there are none)."""
        if not self.total:
            return 0.0
        return self.distribution[5 - stars] / self.total * 100


def empty_stats() -> RatingStats:
    return RatingStats(average=0.0, total=0, distribution=[0, 0, 0, 0, 0])


def _check_stars(value) -> int:
    stars = int(value)
    if not 1 <= stars <= 5:
        raise ValueError(f"Invalid rating: {value}. Must be 1-5")
    return stars


def stats_from_counts(counts: dict[int, int], average: float | None = None) -> RatingStats:
    """Build stats from a {stars: count} mapping.

    *average* is used as given when supplied; otherwise it is derived from
    the counts.
    """
    distribution = [int(counts.get(stars, 0)) for stars in STARS]
    total = sum(distribution)
    if total == 0:
        return empty_stats()
    if average is None:
        average = sum(stars * counts.get(stars, 0) for stars in STARS) / total
    return RatingStats(average=round(float(average), 1), total=total, distribution=distribution)


def compute_rating_stats(ratings: list[int]) -> RatingStats:
    """Aggregate raw 1-5 ratings into average, total and histogram."""
    counts: dict[int, int] = {}
    for value in ratings:
        stars = _check_stars(value)
        counts[stars] = counts.get(stars, 0) + 1
    return stats_from_counts(counts)


# ----------------------------------------------------------------------
# Submission outcome and form state
# ----------------------------------------------------------------------


@dataclass
class SubmissionResult:
    """What a rate-and-review submission actually recorded."""

    rating_recorded: bool = False
    review_recorded: bool = False
    review_attempted: bool = False
    error: GatewayError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def partial(self) -> bool:
        """Rating stored but the review text was lost."""
        return self.rating_recorded and self.review_attempted and not self.review_recorded


class FormState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class RatingForm:
    """Idle -> Submitting -> Success | Failed.

    Failed keeps the text for resubmission and returns to Idle on
    ``acknowledge()``; Success clears the input.
    """

    selected_rating: int = 0
    review_text: str = ""
    state: FormState = FormState.IDLE
    last_result: SubmissionResult | None = field(default=None, repr=False)

    def begin(self) -> None:
        if self.state is FormState.SUBMITTING:
            raise RuntimeError("Submission already in progress")
        if not self.selected_rating:
            raise ValidationError({"rating": "Please select a rating before submitting"})
        try:
            self.selected_rating = _check_stars(self.selected_rating)
        except (TypeError, ValueError) as exc:
            raise ValidationError({"rating": str(exc)}) from exc
        self.state = FormState.SUBMITTING

    def finish(self, result: SubmissionResult) -> None:
        self.last_result = result
        if result.ok:
            self.state = FormState.SUCCESS
            self.selected_rating = 0
            self.review_text = ""
        else:
            self.state = FormState.FAILED

    def fail(self) -> None:
        """Submission raised before producing a result; keep the input."""
        self.last_result = None
        self.state = FormState.FAILED

    def acknowledge(self) -> None:
        """Return to Idle after a terminal state."""
        if self.state in (FormState.SUCCESS, FormState.FAILED):
            self.state = FormState.IDLE


# ----------------------------------------------------------------------
# Service
# ----------------------------------------------------------------------


class RatingService:
    """Reads and writes ratings through the data gateway."""

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    def get_stats(self, product_id: str) -> RatingStats:
        result = self.gateway.rpc("calculate_product_rating", {"p_id": product_id})
        # Set-returning functions come back as a one-row list
        if isinstance(result, list):
            result = result[0] if result else None
        return RatingStats.from_record(result)

    def list_reviews(self, product_id: str) -> list[dict]:
        return self.gateway.fetch(
            "product_reviews", Query().eq("product_id", product_id).newest_first()
        )

    def submit(self, product_id: str, rating: int, review_text: str = "",
               user_name: str = ANONYMOUS) -> SubmissionResult:
        """Record a rating and, when text is given, a review."""
        stars = _check_stars(rating)
        result = SubmissionResult()
        try:
            self.gateway.insert("product_ratings", {"product_id": product_id, "rating": stars})
        except GatewayError as exc:
            logger.error("Rating insert failed for product %s: %s", product_id, exc)
            result.error = exc
            return result
        result.rating_recorded = True

        text = (review_text or "").strip()
        if not text:
            return result

        result.review_attempted = True
        try:
            self.gateway.insert("product_reviews", {
                "product_id": product_id,
                "rating": stars,
                "review_text": text,
                "user_name": user_name,
            })
        except GatewayError as exc:
            logger.error(
                "Review insert failed for product %s after rating was recorded: %s",
                product_id, exc,
            )
            result.error = exc
            return result
        result.review_recorded = True
        return result

    def submit_form(self, form: RatingForm, product_id: str) -> SubmissionResult:
        """Drive *form* through one submission."""
        form.begin()
        try:
            result = self.submit(product_id, form.selected_rating, form.review_text)
        except Exception:
            form.fail()
            raise
        form.finish(result)
        return result

    def rate_article(self, blog_id: str, rating: int) -> dict:
        return self.gateway.insert("ratings", {"blog_id": blog_id, "rating": _check_stars(rating)})

    def article_stats(self, blog_id: str) -> RatingStats:
        rows = self.gateway.fetch("ratings", Query().eq("blog_id", blog_id))
        return compute_rating_stats([row["rating"] for row in rows])

    def article_average(self, blog_id: str) -> float:
        return self.article_stats(blog_id).average
