"""Back-office product management: validation, image uploads and saves."""
import logging
from dataclasses import dataclass, field

from src.models.product import ProductKind
from src.services.errors import GatewayError, ValidationError
from src.services.gateway import DataGateway, Query

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {
    "name": "Name is required",
    "brand": "Brand is required",
    "display_specs": "Display specifications are required",
    "processor": "Processor is required",
    "ram": "RAM is required",
    "storage": "Storage is required",
    "battery": "Battery specifications are required",
}

OPTIONAL_TEXT = ("model_name", "os", "color", "image_url")
JSON_GROUPS = ("multimedia_specs", "design_specs", "performance_specs", "display_details")

KIND_FIELDS = {
    ProductKind.MOBILE: {
        "text": ("chipset", "charging_specs", "screen_size", "resolution"),
        "json": ("camera_details", "sensor_specs", "network_specs", "general_specs"),
    },
    ProductKind.LAPTOP: {
        "text": ("graphics", "ports"),
        "json": ("connectivity_specs",),
    },
}


def _text(value) -> str:
    return str(value).strip() if value is not None else ""


def validate_product(data: dict, kind) -> dict:
    """Check required fields and return the payload for *kind*'s table."""
    kind = ProductKind.parse(kind)
    errors: dict[str, str] = {}
    cleaned: dict = {}

    for name, message in REQUIRED_FIELDS.items():
        value = _text(data.get(name))
        if not value:
            errors[name] = message
        cleaned[name] = value

    if kind is ProductKind.MOBILE:
        camera = _text(data.get("camera"))
        if not camera:
            errors["camera"] = "Camera specifications are required"
        cleaned["camera"] = camera

    raw_price = data.get("price", 0)
    try:
        price = float(raw_price if raw_price not in (None, "") else 0)
    except (TypeError, ValueError):
        errors["price"] = "Price must be a number"
    else:
        if price < 0:
            errors["price"] = "Price must be positive"
        cleaned["price"] = price

    gallery = data.get("gallery_images") or []
    if not isinstance(gallery, (list, tuple)) or not all(isinstance(u, str) for u in gallery):
        errors["gallery_images"] = "Gallery images must be a list of URLs"
    else:
        cleaned["gallery_images"] = list(gallery)

    if errors:
        raise ValidationError(errors)

    for name in OPTIONAL_TEXT + KIND_FIELDS[kind]["text"]:
        cleaned[name] = _text(data.get(name)) or None
    for name in JSON_GROUPS + KIND_FIELDS[kind]["json"]:
        if data.get(name) is not None:
            cleaned[name] = data[name]
    return cleaned


@dataclass
class ImageUpload:
    content: bytes
    filename: str


@dataclass
class SaveOutcome:
    """What a product save managed to do before it stopped."""

    completed_steps: list[str] = field(default_factory=list)
    failed_step: str | None = None
    uploaded_urls: list[str] = field(default_factory=list)
    product: dict | None = None
    error: Exception | None = None
    compensated: bool = False

    @property
    def ok(self) -> bool:
        return self.failed_step is None


class ProductAdmin:
    """Create, edit and delete mobile and laptop records."""

    def __init__(self, gateway: DataGateway, image_store):
        self.gateway = gateway
        self.image_store = image_store

    def list_products(self, kind) -> list[dict]:
        return self.gateway.fetch(ProductKind.parse(kind).table, Query().newest_first())

    def save(self, kind, data: dict, product_id: str | None = None,
             main_image: ImageUpload | None = None,
             gallery: list[ImageUpload] | None = None) -> SaveOutcome:
        """Upload images, then insert or update the product.

        Runs as ordered steps: ``upload_main``, ``upload_gallery``, then
        ``insert`` or ``update``. Validation errors raise before any step
        runs. A failing step stops the save; images uploaded by this call
        are then deleted again and the outcome records how far it got.
        """
        kind = ProductKind.parse(kind)
        payload = validate_product(data, kind)
        outcome = SaveOutcome()
        step = "upload_main"
        try:
            if main_image is not None:
                url = self.image_store.upload(main_image.content, main_image.filename, "main")
                outcome.uploaded_urls.append(url)
                payload["image_url"] = url
            outcome.completed_steps.append(step)

            step = "upload_gallery"
            if gallery:
                new_urls = []
                for upload in gallery:
                    url = self.image_store.upload(upload.content, upload.filename, "gallery")
                    outcome.uploaded_urls.append(url)
                    new_urls.append(url)
                # New gallery images go after the existing ones
                payload["gallery_images"] = payload.get("gallery_images", []) + new_urls
            outcome.completed_steps.append(step)

            step = "update" if product_id else "insert"
            if product_id:
                outcome.product = self.gateway.update(kind.table, payload, {"id": product_id})
            else:
                outcome.product = self.gateway.insert(kind.table, payload)
            outcome.completed_steps.append(step)
        except (GatewayError, OSError) as exc:
            logger.error("Saving %s failed at step %s: %s", kind.label, step, exc)
            outcome.failed_step = step
            outcome.error = exc
            outcome.compensated = self._discard_uploads(outcome.uploaded_urls)
            return outcome

        logger.info(
            "%s %s %s", kind.label, "updated" if product_id else "added", outcome.product.get("id"),
        )
        return outcome

    def _discard_uploads(self, urls: list[str]) -> bool:
        if not urls:
            return False
        removed = True
        for url in urls:
            try:
                removed = self.image_store.delete(url) and removed
            except (GatewayError, OSError) as exc:
                logger.warning("Could not remove orphaned image %s: %s", url, exc)
                removed = False
        return removed

    def delete(self, kind, product_id: str) -> dict:
        deleted = self.gateway.delete(ProductKind.parse(kind).table, {"id": product_id})
        logger.info("Deleted %s %s", ProductKind.parse(kind).label, product_id)
        return deleted

    @staticmethod
    def remove_gallery_image(gallery: list[str], index: int) -> list[str]:
        """Return *gallery* without the image at *index*."""
        if not 0 <= index < len(gallery):
            raise IndexError(f"No gallery image at position {index}")
        return gallery[:index] + gallery[index + 1:]
