"""Image storage for product and article pictures.

Images live under a folder key (``main`` or ``gallery``). The returned
public URL is stored verbatim as the image reference.
"""
import logging
import mimetypes
import uuid
from pathlib import Path

import requests

from config import BACKEND_URL, IMAGES_DIR, IMAGE_FOLDERS, PUBLIC_BASE_URL

logger = logging.getLogger(__name__)

STORAGE_BUCKET = "blog-images"


def _extension(original_name: str) -> str:
    ext = Path(original_name or "").suffix.lower() or ".jpg"
    # Normalize jpeg
    if ext in (".jpeg", ".jpe"):
        ext = ".jpg"
    return ext


def _object_path(folder: str, original_name: str) -> str:
    if folder not in IMAGE_FOLDERS:
        raise ValueError(f"Invalid image folder: {folder}. Must be one of {IMAGE_FOLDERS}")
    return f"{folder}/{uuid.uuid4().hex}{_extension(original_name)}"


class LocalImageStore:
    """Stores images on disk and serves them from ``/images``."""

    def __init__(self, root: Path = IMAGES_DIR, public_base: str = PUBLIC_BASE_URL):
        self.root = Path(root)
        self.public_base = public_base.rstrip("/")

    def upload(self, content: bytes, original_name: str, folder: str) -> str:
        """Save *content* and return its public URL."""
        rel_path = _object_path(folder, original_name)
        filepath = self.root / rel_path
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "wb") as f:
            f.write(content)
        logger.info("Saved uploaded image %s", rel_path)
        return f"{self.public_base}/images/{rel_path}"

    def delete(self, url: str) -> bool:
        """Remove a previously uploaded image. Returns False if it is not ours."""
        marker = "/images/"
        if marker not in url:
            return False
        rel_path = url.split(marker, 1)[1]
        filepath = (self.root / rel_path).resolve()
        if self.root.resolve() not in filepath.parents:
            return False
        try:
            filepath.unlink()
        except FileNotFoundError:
            return False
        logger.info("Deleted image %s", rel_path)
        return True


class RemoteImageStore:
    """Stores images in the hosted backend's object storage."""

    def __init__(self, gateway, bucket: str = STORAGE_BUCKET):
        self.gateway = gateway
        self.bucket = bucket

    def upload(self, content: bytes, original_name: str, folder: str) -> str:
        rel_path = _object_path(folder, original_name)
        content_type = mimetypes.guess_type(original_name)[0] or "application/octet-stream"
        url = self.gateway.upload_object(self.bucket, rel_path, content, content_type)
        logger.info("Uploaded image %s to bucket %s", rel_path, self.bucket)
        return url

    def delete(self, url: str) -> bool:
        marker = f"/object/public/{self.bucket}/"
        if marker not in url:
            return False
        self.gateway.delete_object(self.bucket, url.split(marker, 1)[1])
        logger.info("Deleted image %s from bucket %s", url, self.bucket)
        return True


def download_image(url: str) -> tuple[bytes, str] | None:
    """Download an image from *url*.

    Returns ``(content, filename)`` on success, or None.
    """
    try:
        resp = requests.get(url, timeout=15)
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Failed to download image %s: %s", url, exc)
        return None

    # Determine extension from content-type or URL
    content_type = resp.headers.get("Content-Type", "")
    ext = mimetypes.guess_extension(content_type.split(";")[0].strip()) or ""
    if not ext or ext == ".bin":
        url_path = url.split("?")[0]
        if "." in url_path.rsplit("/", 1)[-1]:
            ext = "." + url_path.rsplit(".", 1)[-1].lower()
        else:
            ext = ".jpg"
    return resp.content, f"download{ext}"


_store = None


def get_image_store():
    """Remote storage when a hosted backend is configured, local disk otherwise."""
    global _store
    if _store is None:
        if BACKEND_URL:
            from src.services.gateway import get_gateway
            _store = RemoteImageStore(get_gateway())
        else:
            _store = LocalImageStore()
    return _store


def upload_image(content: bytes, original_name: str, folder: str) -> str:
    return get_image_store().upload(content, original_name, folder)
