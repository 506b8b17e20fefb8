"""Tests for the SQL and REST data gateways."""
from unittest.mock import Mock

import pytest
import requests

from conftest import blog_payload
from src.services.errors import GatewayError, NotFoundError
from src.services.gateway import Filter, Query, RestGateway


# ----------------------------------------------------------------------
# Query
# ----------------------------------------------------------------------


def test_query_is_immutable_and_chains():
    base = Query().eq("category", "TECH")
    paged = base.newest_first().page(0, 5)
    assert base.order is None
    assert base.range is None
    assert paged.order == ("created_at", "desc")
    assert paged.range == (0, 5)
    assert paged.filters == (Filter("category", "eq", "TECH"),)


def test_query_rejects_bad_range_and_op():
    with pytest.raises(ValueError):
        Query().page(5, 4)
    with pytest.raises(ValueError):
        Query().where("title", "regex", "x")


def test_filter_list_values_become_hashable():
    q = Query().where("id", "in", ["a", "b"])
    assert hash(q.key())
    assert q.filters[0].value == ("a", "b")


# ----------------------------------------------------------------------
# SqlGateway
# ----------------------------------------------------------------------


def test_insert_fills_defaults(gateway):
    blog = gateway.insert("blogs", blog_payload(1))
    assert blog["id"]
    assert blog["view_count"] == 0
    assert blog["featured"] is False


def test_fetch_orders_newest_first_and_pages(gateway, make_blogs):
    make_blogs(10)
    query = Query().newest_first()
    first = gateway.fetch("blogs", query.page(0, 3))
    second = gateway.fetch("blogs", query.page(4, 7))
    assert [b["slug"] for b in first] == ["post-0", "post-1", "post-2", "post-3"]
    assert [b["slug"] for b in second] == ["post-4", "post-5", "post-6", "post-7"]


def test_range_past_end_returns_short_page(gateway, make_blogs):
    make_blogs(3)
    rows = gateway.fetch("blogs", Query().newest_first().page(2, 7))
    assert [b["slug"] for b in rows] == ["post-2"]


def test_limit_and_range_take_smaller_window(gateway, make_blogs):
    make_blogs(10)
    rows = gateway.fetch("blogs", Query().newest_first().page(0, 5).take(2))
    assert len(rows) == 2


def test_filter_ops(gateway, make_blogs):
    blogs = make_blogs(5)
    gateway.update("blogs", {"title": "Pixel 9 review"}, {"id": blogs[2]["id"]})

    found = gateway.fetch("blogs", Query().where("title", "ilike", "%pixel%"))
    assert [b["id"] for b in found] == [blogs[2]["id"]]

    others = gateway.fetch("blogs", Query().where("id", "neq", blogs[0]["id"]))
    assert len(others) == 4

    picked = gateway.fetch("blogs", Query().where("id", "in", [blogs[1]["id"], blogs[3]["id"]]))
    assert {b["id"] for b in picked} == {blogs[1]["id"], blogs[3]["id"]}

    with_author = gateway.fetch("blogs", Query().where("author", "not_null"))
    assert len(with_author) == 5


def test_count_applies_filters(gateway, make_blogs):
    make_blogs(4)
    gateway.insert("blogs", blog_payload(99, category="GAMES", subcategory="PC"))
    assert gateway.count("blogs") == 5
    assert gateway.count("blogs", Query().eq("category", "GAMES")) == 1


def test_update_and_delete_without_match_raise_not_found(gateway):
    with pytest.raises(NotFoundError):
        gateway.update("blogs", {"title": "x"}, {"id": "missing"})
    with pytest.raises(NotFoundError):
        gateway.delete("blogs", {"id": "missing"})


def test_delete_returns_deleted_record(gateway, make_blogs):
    blog = make_blogs(1)[0]
    deleted = gateway.delete("blogs", {"id": blog["id"]})
    assert deleted["slug"] == blog["slug"]
    assert gateway.fetch_one("blogs", Query().eq("id", blog["id"])) is None


def test_mutation_requires_match(gateway):
    with pytest.raises(ValueError):
        gateway.mutate("blogs", "delete", None, None)
    with pytest.raises(ValueError):
        gateway.mutate("blogs", "upsert", {"title": "x"})


def test_unknown_collection_and_column(gateway):
    with pytest.raises(GatewayError) as err:
        gateway.fetch("comments")
    assert err.value.kind == "not_found"

    with pytest.raises(GatewayError) as err:
        gateway.fetch("blogs", Query().eq("nope", 1))
    assert err.value.kind == "constraint"


def test_unique_slug_violation_is_constraint(gateway):
    gateway.insert("blogs", blog_payload(1))
    with pytest.raises(GatewayError) as err:
        gateway.insert("blogs", blog_payload(1))
    assert err.value.kind == "constraint"


def test_rating_range_is_enforced_by_store(gateway):
    with pytest.raises(GatewayError) as err:
        gateway.insert("product_ratings", {"product_id": "p1", "rating": 6})
    assert err.value.kind == "constraint"


def test_fetch_one_rejects_multiple_rows(gateway, make_blogs):
    make_blogs(2)
    with pytest.raises(GatewayError):
        gateway.fetch_one("blogs", Query().eq("category", "TECH"))


def test_rpc_calculate_product_rating(gateway):
    for stars in (5, 5, 4, 1):
        gateway.insert("product_ratings", {"product_id": "p1", "rating": stars})
    gateway.insert("product_ratings", {"product_id": "other", "rating": 1})

    stats = gateway.rpc("calculate_product_rating", {"p_id": "p1"})
    assert stats == {
        "average_rating": 3.8,
        "total_ratings": 4,
        "rating_distribution": [2, 1, 0, 0, 1],
    }


def test_rpc_calculate_product_rating_without_ratings(gateway):
    stats = gateway.rpc("calculate_product_rating", {"p_id": "nothing"})
    assert stats["total_ratings"] == 0
    assert stats["rating_distribution"] == [0, 0, 0, 0, 0]


def test_rpc_increment_view_count(gateway, make_blogs):
    blog = make_blogs(1)[0]
    gateway.rpc("increment_view_count", {"blog_id": blog["id"]})
    gateway.rpc("increment_view_count", {"blog_id": blog["id"]})
    assert gateway.fetch_one("blogs", Query().eq("id", blog["id"]))["view_count"] == 2


def test_unknown_rpc(gateway):
    with pytest.raises(GatewayError) as err:
        gateway.rpc("drop_everything")
    assert err.value.kind == "not_found"


# ----------------------------------------------------------------------
# RestGateway
# ----------------------------------------------------------------------


def _response(status=200, json_body=None, headers=None, text=""):
    resp = Mock()
    resp.status_code = status
    resp.json.return_value = json_body
    resp.headers = headers or {}
    resp.text = text
    resp.content = b"x" if json_body is not None else b""
    return resp


@pytest.fixture
def http():
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def rest(http):
    return RestGateway("https://backend.example", "key-123", timeout=5, http=http)


def test_rest_sets_auth_headers(rest, http):
    assert http.headers["apikey"] == "key-123"
    assert http.headers["Authorization"] == "Bearer key-123"


def test_rest_fetch_encodes_query(rest, http):
    http.request.return_value = _response(json_body=[{"id": "1"}])
    query = (
        Query()
        .eq("category", "TECH")
        .eq("featured", True)
        .where("title", "ilike", "%pix%")
        .where("id", "in", ["a", "b"])
        .newest_first()
        .page(6, 11)
    )
    rows = rest.fetch("blogs", query)

    assert rows == [{"id": "1"}]
    method, url = http.request.call_args.args
    params = http.request.call_args.kwargs["params"]
    assert method == "GET"
    assert url == "https://backend.example/rest/v1/blogs"
    assert ("category", "eq.TECH") in params
    assert ("featured", "eq.true") in params
    assert ("title", "ilike.*pix*") in params
    assert ("id", "in.(a,b)") in params
    assert ("order", "created_at.desc") in params
    assert ("offset", "6") in params
    assert ("limit", "6") in params
    assert http.request.call_args.kwargs["timeout"] == 5


def test_rest_count_reads_content_range(rest, http):
    http.request.return_value = _response(headers={"Content-Range": "0-4/42"})
    assert rest.count("blogs", Query().eq("featured", True)) == 42
    assert http.request.call_args.kwargs["headers"] == {"Prefer": "count=exact"}


def test_rest_network_error(rest, http):
    http.request.side_effect = requests.ConnectionError("down")
    with pytest.raises(GatewayError) as err:
        rest.fetch("blogs")
    assert err.value.kind == "network"


def test_rest_status_mapping(rest, http):
    http.request.return_value = _response(409, {"message": "duplicate key", "code": "23505"})
    with pytest.raises(GatewayError) as err:
        rest.insert("blogs", {"slug": "a"})
    assert err.value.kind == "constraint"

    http.request.return_value = _response(404, {"message": "missing"})
    with pytest.raises(NotFoundError):
        rest.fetch("nothing")

    http.request.return_value = _response(500, {"message": "boom"})
    with pytest.raises(GatewayError) as err:
        rest.fetch("blogs")
    assert err.value.kind == "backend"


def test_rest_update_without_rows_is_not_found(rest, http):
    http.request.return_value = _response(json_body=[])
    with pytest.raises(NotFoundError):
        rest.update("blogs", {"title": "x"}, {"id": "missing"})
    assert http.request.call_args.args[0] == "PATCH"
    assert http.request.call_args.kwargs["params"] == [("id", "eq.missing")]


def test_rest_rpc_posts_params(rest, http):
    http.request.return_value = _response(json_body=[{"average_rating": 4.0}])
    result = rest.rpc("calculate_product_rating", {"p_id": "p1"})
    assert result == [{"average_rating": 4.0}]
    method, url = http.request.call_args.args
    assert method == "POST"
    assert url.endswith("/rest/v1/rpc/calculate_product_rating")
    assert http.request.call_args.kwargs["json"] == {"p_id": "p1"}


def test_rest_upload_object_returns_public_url(rest, http):
    http.post.return_value = _response(200, {"Key": "blog-images/main/a.jpg"})
    url = rest.upload_object("blog-images", "main/a.jpg", b"img", "image/jpeg")
    assert url == "https://backend.example/storage/v1/object/public/blog-images/main/a.jpg"
