"""Shared utility functions for services."""
import logging
import re
import time
from typing import Callable, TypeVar

from src.services.errors import GatewayError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def slugify(text: str, max_length: int = 120) -> str:
    """Lowercase, strip punctuation, and join words with hyphens."""
    text = (text or "").lower().strip()
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    text = re.sub(r"[\s-]+", "-", text)
    return text.strip("-")[:max_length].rstrip("-")


def with_retries(fn: Callable[[], T], retries: int, delay: float, label: str = "request") -> T:
    """Call *fn*, retrying up to *retries* times on GatewayError with a fixed delay."""
    attempt = 0
    while True:
        try:
            return fn()
        except GatewayError as exc:
            if attempt >= retries:
                logger.error("%s failed after %d attempt(s): %s", label, attempt + 1, exc)
                raise
            attempt += 1
            logger.warning("%s failed (%s), retry %d/%d in %.1fs", label, exc, attempt, retries, delay)
            time.sleep(delay)


def text_or_none(value) -> str | None:
    """Strip *value*; empty strings become None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None
