"""Tests for product validation and the save steps."""
import pytest

from src.services.errors import GatewayError, ValidationError
from src.services.gateway import Query
from src.services.image_store import LocalImageStore
from src.services.product_admin import ImageUpload, ProductAdmin, validate_product

VALID = {
    "name": "Pixel 8",
    "brand": "Google",
    "price": 59999,
    "display_specs": "6.2 inch OLED",
    "processor": "Tensor G3",
    "ram": "8GB",
    "storage": "128GB",
    "battery": "4575mAh",
    "camera": "50MP + 12MP",
}


class RecordingStore:
    """Image store that remembers uploads and deletions."""

    def __init__(self, fail_after: int | None = None):
        self.uploaded = []
        self.deleted = []
        self.fail_after = fail_after

    def upload(self, content, original_name, folder):
        if self.fail_after is not None and len(self.uploaded) >= self.fail_after:
            raise GatewayError("storage unavailable", kind="network")
        url = f"/images/{folder}/{len(self.uploaded)}-{original_name}"
        self.uploaded.append(url)
        return url

    def delete(self, url):
        self.deleted.append(url)
        return True


def test_validate_product_required_fields():
    with pytest.raises(ValidationError) as err:
        validate_product({"price": -1}, "mobile")
    errors = err.value.errors
    assert {"name", "brand", "processor", "camera"} <= set(errors)
    assert errors["price"] == "Price must be positive"


def test_camera_only_required_for_mobile():
    data = {k: v for k, v in VALID.items() if k != "camera"}
    cleaned = validate_product(dict(data, graphics="RTX 4060"), "laptop")
    assert "camera" not in cleaned
    assert cleaned["graphics"] == "RTX 4060"
    with pytest.raises(ValidationError):
        validate_product(data, "mobile")


def test_validate_product_normalizes_optional_text():
    cleaned = validate_product(dict(VALID, os="  ", color=" Obsidian "), "mobile")
    assert cleaned["os"] is None
    assert cleaned["color"] == "Obsidian"
    assert cleaned["price"] == 59999.0
    assert cleaned["gallery_images"] == []


def test_save_new_product_with_images(gateway):
    store = RecordingStore()
    admin = ProductAdmin(gateway, store)
    outcome = admin.save(
        "mobile", dict(VALID, gallery_images=["/images/gallery/old.jpg"]),
        main_image=ImageUpload(b"main", "front.png"),
        gallery=[ImageUpload(b"g1", "a.jpg"), ImageUpload(b"g2", "b.jpg")],
    )
    assert outcome.ok
    assert outcome.completed_steps == ["upload_main", "upload_gallery", "insert"]
    product = outcome.product
    assert product["image_url"] == "/images/main/0-front.png"
    assert product["gallery_images"] == [
        "/images/gallery/old.jpg", "/images/gallery/1-a.jpg", "/images/gallery/2-b.jpg",
    ]


def test_save_updates_existing(gateway):
    admin = ProductAdmin(gateway, RecordingStore())
    created = admin.save("mobile", VALID).product
    outcome = admin.save("mobile", dict(VALID, price=49999), product_id=created["id"])
    assert outcome.completed_steps[-1] == "update"
    assert gateway.fetch_one("mobile_products", Query().eq("id", created["id"]))["price"] == 49999


def test_failed_upload_stops_and_discards(gateway):
    store = RecordingStore(fail_after=1)
    admin = ProductAdmin(gateway, store)
    outcome = admin.save(
        "mobile", VALID,
        main_image=ImageUpload(b"main", "front.png"),
        gallery=[ImageUpload(b"g1", "a.jpg")],
    )
    assert not outcome.ok
    assert outcome.failed_step == "upload_gallery"
    assert outcome.completed_steps == ["upload_main"]
    assert outcome.compensated
    assert store.deleted == ["/images/main/0-front.png"]
    assert gateway.count("mobile_products") == 0


def test_failed_write_discards_uploads(gateway):
    store = RecordingStore()
    admin = ProductAdmin(gateway, store)
    outcome = admin.save(
        "mobile", VALID, product_id="missing", main_image=ImageUpload(b"m", "x.jpg"),
    )
    assert outcome.failed_step == "update"
    assert outcome.error.kind == "not_found"
    assert store.deleted == store.uploaded


def test_validation_error_uploads_nothing(gateway):
    store = RecordingStore()
    with pytest.raises(ValidationError):
        ProductAdmin(gateway, store).save("mobile", {}, main_image=ImageUpload(b"m", "x.jpg"))
    assert store.uploaded == []


def test_remove_gallery_image():
    gallery = ["a", "b", "c"]
    assert ProductAdmin.remove_gallery_image(gallery, 1) == ["a", "c"]
    assert gallery == ["a", "b", "c"]
    with pytest.raises(IndexError):
        ProductAdmin.remove_gallery_image(gallery, 3)


def test_delete_product(gateway):
    admin = ProductAdmin(gateway, RecordingStore())
    product = admin.save("laptop", dict(VALID, name="ThinkPad")).product
    admin.delete("laptop", product["id"])
    assert admin.list_products("laptop") == []


def test_local_store_round_trip(tmp_path):
    store = LocalImageStore(root=tmp_path, public_base="")
    url = store.upload(b"\x89PNG", "photo.JPEG", "gallery")
    assert url.startswith("/images/gallery/")
    assert url.endswith(".jpg")
    assert (tmp_path / url.split("/images/", 1)[1]).read_bytes() == b"\x89PNG"
    assert store.delete(url)
    assert not store.delete(url)
    assert not store.delete("https://elsewhere.example/x.jpg")
    with pytest.raises(ValueError):
        store.upload(b"x", "a.jpg", "thumbnails")
