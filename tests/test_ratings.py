"""Tests for rating aggregation, submission and the rating form."""
from unittest.mock import Mock

import pytest

from src.services.errors import GatewayError, ValidationError
from src.services.gateway import Query
from src.services.ratings import (
    FormState, RatingForm, RatingService, RatingStats, SubmissionResult, compute_rating_stats,
)


class FailingInserts:
    """Wraps a gateway and fails inserts into the named collections."""

    def __init__(self, inner, fail_on):
        self.inner = inner
        self.fail_on = set(fail_on)

    def insert(self, collection, payload):
        if collection in self.fail_on:
            raise GatewayError(f"insert into {collection} refused", kind="network")
        return self.inner.insert(collection, payload)

    def __getattr__(self, name):
        return getattr(self.inner, name)


# ----------------------------------------------------------------------
# Aggregation
# ----------------------------------------------------------------------


def test_compute_rating_stats():
    stats = compute_rating_stats([5, 5, 4, 3, 1])
    assert stats.total == 5
    assert stats.distribution == [2, 1, 1, 0, 1]
    assert sum(stats.distribution) == stats.total
    assert stats.average == 3.6


def test_empty_stats():
    stats = compute_rating_stats([])
    assert stats == RatingStats(average=0.0, total=0, distribution=[0, 0, 0, 0, 0])
    assert stats.share(5) == 0.0


def test_invalid_star_value():
    with pytest.raises(ValueError):
        compute_rating_stats([6])


def test_share_is_percentage():
    stats = compute_rating_stats([5, 5, 1, 1])
    assert stats.share(5) == 50.0
    assert stats.share(3) == 0.0


def test_from_record_handles_missing():
    assert RatingStats.from_record(None).total == 0
    stats = RatingStats.from_record(
        {"average_rating": 4.5, "total_ratings": 2, "rating_distribution": [1, 1, 0, 0, 0]}
    )
    assert stats.average == 4.5
    assert stats.distribution == [1, 1, 0, 0, 0]


# ----------------------------------------------------------------------
# Service
# ----------------------------------------------------------------------


def test_submit_rating_only(gateway):
    service = RatingService(gateway)
    result = service.submit("p1", 4)
    assert result.ok
    assert result.rating_recorded
    assert not result.review_attempted
    assert gateway.count("product_reviews") == 0
    assert service.get_stats("p1").total == 1


def test_submit_with_review(gateway):
    service = RatingService(gateway)
    result = service.submit("p1", 5, "  Great battery  ")
    assert result.ok and result.review_recorded
    reviews = service.list_reviews("p1")
    assert len(reviews) == 1
    assert reviews[0]["review_text"] == "Great battery"
    assert reviews[0]["user_name"] == "Anonymous"
    assert reviews[0]["rating"] == 5


def test_rating_failure_skips_review(gateway):
    service = RatingService(FailingInserts(gateway, {"product_ratings"}))
    result = service.submit("p1", 5, "text")
    assert not result.ok
    assert not result.rating_recorded
    assert not result.review_attempted
    assert gateway.count("product_reviews") == 0


def test_review_failure_keeps_rating(gateway):
    service = RatingService(FailingInserts(gateway, {"product_reviews"}))
    result = service.submit("p1", 3, "text")
    assert result.partial
    assert result.error.kind == "network"
    assert gateway.count("product_ratings", Query().eq("product_id", "p1")) == 1
    assert gateway.count("product_reviews") == 0


def test_get_stats_unwraps_list_result():
    class ListRpc:
        def rpc(self, name, params=None):
            return [{"average_rating": 4.0, "total_ratings": 1, "rating_distribution": [0, 1, 0, 0, 0]}]

    stats = RatingService(ListRpc()).get_stats("p1")
    assert stats.total == 1
    assert stats.average == 4.0


def test_article_ratings(gateway):
    service = RatingService(gateway)
    service.rate_article("b1", 5)
    service.rate_article("b1", 4)
    service.rate_article("b2", 1)
    assert service.article_average("b1") == 4.5
    assert service.article_stats("b2").total == 1
    with pytest.raises(ValueError):
        service.rate_article("b1", 0)


# ----------------------------------------------------------------------
# Form state
# ----------------------------------------------------------------------


def test_form_requires_rating():
    form = RatingForm(review_text="hello")
    with pytest.raises(ValidationError):
        form.begin()
    assert form.state is FormState.IDLE


def test_form_success_clears_input(gateway):
    form = RatingForm(selected_rating=4, review_text="Solid")
    result = RatingService(gateway).submit_form(form, "p1")
    assert result.ok
    assert form.state is FormState.SUCCESS
    assert form.selected_rating == 0
    assert form.review_text == ""
    form.acknowledge()
    assert form.state is FormState.IDLE


def test_form_failure_keeps_text():
    form = RatingForm(selected_rating=2, review_text="Keep me")
    form.begin()
    with pytest.raises(RuntimeError):
        form.begin()
    form.finish(SubmissionResult(error=GatewayError("down", kind="network")))
    assert form.state is FormState.FAILED
    assert form.review_text == "Keep me"
    assert form.selected_rating == 2
    form.acknowledge()
    assert form.state is FormState.IDLE


def test_form_rejects_out_of_range_rating(gateway):
    form = RatingForm(selected_rating=7, review_text="x")
    with pytest.raises(ValidationError) as err:
        RatingService(gateway).submit_form(form, "p1")
    assert "rating" in err.value.errors
    assert form.state is FormState.IDLE
    assert gateway.count("product_ratings") == 0


def test_form_unexpected_error_ends_in_failed():
    gateway = Mock()
    gateway.insert.side_effect = KeyError("boom")
    form = RatingForm(selected_rating=3, review_text="Keep me")
    with pytest.raises(KeyError):
        RatingService(gateway).submit_form(form, "p1")
    assert form.state is FormState.FAILED
    assert form.review_text == "Keep me"

    form.acknowledge()
    form.begin()
    assert form.state is FormState.SUBMITTING
