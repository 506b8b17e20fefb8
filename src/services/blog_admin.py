"""Back-office article management."""
import logging

from config import MAX_CATEGORY_FEATURED, MAX_HOME_FEATURED
from src.models.category import Category, popular_flag_column, subcategories_for
from src.services.errors import CapacityExceededError, NotFoundError, ValidationError
from src.services.gateway import DataGateway, Query
from src.services.utils import slugify, text_or_none

logger = logging.getLogger(__name__)


def validate_blog(data: dict) -> dict:
    """Return cleaned article fields or raise ValidationError."""
    errors: dict[str, str] = {}
    title = text_or_none(data.get("title"))
    content = text_or_none(data.get("content"))
    if not title:
        errors["title"] = "Title is required"
    if not content:
        errors["content"] = "Content is required"

    category = None
    try:
        category = Category.parse(data.get("category"))
    except ValueError:
        errors["category"] = "Choose a valid category"

    subcategory = text_or_none(data.get("subcategory"))
    if category is not None and subcategory and subcategory not in subcategories_for(category):
        errors["subcategory"] = f"'{subcategory}' is not a {category.value} subcategory"

    if errors:
        raise ValidationError(errors)

    cleaned = {
        "title": title,
        "content": content,
        "category": category.value,
        "subcategory": subcategory,
        "author": text_or_none(data.get("author")),
        "image_url": text_or_none(data.get("image_url")),
    }
    slug = slugify(data.get("slug") or title)
    if not slug:
        raise ValidationError({"slug": "Title must contain letters or digits"})
    cleaned["slug"] = slug
    return cleaned


def group_by_category(blogs: list[dict]) -> dict[Category, list[dict]]:
    grouped: dict[Category, list[dict]] = {cat: [] for cat in Category}
    for blog in blogs:
        try:
            grouped[Category.parse(blog.get("category"))].append(blog)
        except ValueError:
            logger.warning("Blog %s has unknown category %r", blog.get("id"), blog.get("category"))
    return grouped


class BlogAdmin:
    """Create, edit, delete and flag articles."""

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    def list_blogs(self, category=None) -> list[dict]:
        query = Query().newest_first()
        if category is not None:
            query = query.eq("category", Category.parse(category).value)
        return self.gateway.fetch("blogs", query)

    def get(self, blog_id: str) -> dict:
        blog = self.gateway.fetch_one("blogs", Query().eq("id", blog_id))
        if blog is None:
            raise NotFoundError(f"Blog not found: {blog_id}")
        return blog

    def _ensure_unique_slug(self, slug: str, exclude_id: str | None = None) -> None:
        query = Query().eq("slug", slug)
        if exclude_id:
            query = query.where("id", "neq", exclude_id)
        if self.gateway.count("blogs", query):
            raise ValidationError({"slug": f"An article with slug '{slug}' already exists"})

    def create(self, data: dict) -> dict:
        cleaned = validate_blog(data)
        self._ensure_unique_slug(cleaned["slug"])
        blog = self.gateway.insert("blogs", cleaned)
        logger.info("Created blog %s (%s)", blog["id"], blog["slug"])
        return blog

    def update(self, blog_id: str, data: dict) -> dict:
        cleaned = validate_blog(data)
        self._ensure_unique_slug(cleaned["slug"], exclude_id=blog_id)
        return self.gateway.update("blogs", cleaned, {"id": blog_id})

    def delete(self, blog_id: str) -> dict:
        deleted = self.gateway.delete("blogs", {"id": blog_id})
        logger.info("Deleted blog %s", blog_id)
        return deleted

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------

    def toggle_popular(self, blog_id: str, current: bool) -> dict:
        return self.gateway.update("blogs", {"popular": not current}, {"id": blog_id})

    def toggle_category_popular(self, blog_id: str, current: bool) -> dict:
        blog = self.get(blog_id)
        column = popular_flag_column(blog["category"])
        return self.gateway.update("blogs", {column: not current}, {"id": blog_id})

    def toggle_featured(self, blog_id: str, current: bool) -> dict:
        """Flip the homepage featured flag, refusing a seventh slot.

        The count is read before writing, so two concurrent sessions can
        still overshoot the limit.
        """
        if not current:
            featured = self.gateway.count("blogs", Query().eq("featured", True))
            if featured >= MAX_HOME_FEATURED:
                raise CapacityExceededError(
                    f"Maximum of {MAX_HOME_FEATURED} featured blogs allowed on homepage",
                    limit=MAX_HOME_FEATURED,
                )
        return self.gateway.update("blogs", {"featured": not current}, {"id": blog_id})

    def toggle_category_featured(self, blog_id: str, current: bool, category) -> dict:
        """Flip ``featured_in_category`` under the per-category slot limit."""
        cat = Category.parse(category)
        if not current:
            featured = self.gateway.count(
                "blogs", Query().eq("category", cat.value).eq("featured_in_category", True),
            )
            if featured >= MAX_CATEGORY_FEATURED:
                raise CapacityExceededError(
                    f"Maximum of {MAX_CATEGORY_FEATURED} featured blogs allowed for {cat.value} category",
                    limit=MAX_CATEGORY_FEATURED,
                )
        return self.gateway.update("blogs", {"featured_in_category": not current}, {"id": blog_id})
