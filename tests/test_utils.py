"""Tests for shared helpers and image download."""
from unittest.mock import Mock, patch

import pytest
import requests

from src.services.errors import GatewayError
from src.services.image_store import RemoteImageStore, download_image
from src.services.utils import slugify, text_or_none, with_retries


def test_slugify():
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("  Pixel 9 -- Pro  ") == "pixel-9-pro"
    assert slugify("") == ""
    assert len(slugify("word " * 100, max_length=20)) <= 20


def test_text_or_none():
    assert text_or_none("  x ") == "x"
    assert text_or_none("   ") is None
    assert text_or_none(None) is None


def test_with_retries_only_retries_gateway_errors():
    fn = Mock(side_effect=[GatewayError("a"), GatewayError("b"), "ok"])
    with patch("src.services.utils.time.sleep") as sleep:
        assert with_retries(fn, retries=2, delay=1.0) == "ok"
    assert fn.call_count == 3
    assert sleep.call_count == 2

    boom = Mock(side_effect=KeyError("not retried"))
    with pytest.raises(KeyError):
        with_retries(boom, retries=2, delay=0)
    assert boom.call_count == 1


def test_download_image_uses_content_type():
    resp = Mock(content=b"img", headers={"Content-Type": "image/png"})
    resp.raise_for_status.return_value = None
    with patch("src.services.image_store.requests.get", return_value=resp) as get:
        content, name = download_image("https://cdn.example/pic")
    assert content == b"img"
    assert name == "download.png"
    assert get.call_args.kwargs["timeout"] == 15


def test_download_image_failure_returns_none():
    with patch("src.services.image_store.requests.get", side_effect=requests.Timeout("slow")):
        assert download_image("https://cdn.example/pic.jpg") is None


def test_remote_store_uploads_and_deletes_through_gateway():
    gateway = Mock()
    gateway.upload_object.side_effect = (
        lambda bucket, path, content, ctype: f"https://b.example/storage/v1/object/public/{bucket}/{path}"
    )
    store = RemoteImageStore(gateway)
    url = store.upload(b"img", "shot.png", "main")

    bucket, path, content, ctype = gateway.upload_object.call_args.args
    assert bucket == "blog-images"
    assert path.startswith("main/") and path.endswith(".png")
    assert ctype == "image/png"

    assert store.delete(url)
    gateway.delete_object.assert_called_once_with("blog-images", path)
    assert not store.delete("/images/main/local.png")
