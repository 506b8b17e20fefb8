"""Product catalog reads: detail, infinite listings, brands, comparison picks."""
import logging

from config import COMPARE_CANDIDATE_LIMIT, PRODUCT_PAGE_SIZE, SEARCH_RESULT_LIMIT
from src.models.product import ProductKind
from src.services.errors import NotFoundError
from src.services.gateway import DataGateway, Query
from src.services.listing_filter import unique_brands
from src.services.pagination import PageAccumulator, collection_accumulator

logger = logging.getLogger(__name__)


class CatalogService:
    """Product queries over ``mobile_products`` and ``laptops``."""

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    def get_product(self, kind, product_id: str) -> dict:
        table = ProductKind.parse(kind).table
        product = self.gateway.fetch_one(table, Query().eq("id", product_id))
        if product is None:
            raise NotFoundError(f"Product not found: {product_id}")
        return product

    def listing(self, kind) -> PageAccumulator:
        """Newest-first infinite listing of one product kind."""
        table = ProductKind.parse(kind).table
        return collection_accumulator(self.gateway, table, Query().newest_first(), PRODUCT_PAGE_SIZE)

    def list_all(self, kind) -> list[dict]:
        return self.gateway.fetch(ProductKind.parse(kind).table, Query().newest_first())

    def brands(self, kind) -> list[str]:
        rows = self.gateway.fetch(
            ProductKind.parse(kind).table,
            Query().where("brand", "not_null").order_by("brand"),
        )
        return unique_brands(rows)

    def variants(self, kind, product: dict) -> list[dict]:
        """Other members of *product*'s variant family (same name and brand)."""
        query = (
            Query()
            .eq("name", product["name"])
            .eq("brand", product["brand"])
            .where("id", "neq", product["id"])
            .order_by("price")
        )
        return self.gateway.fetch(ProductKind.parse(kind).table, query)

    def compare_candidates(self, kind, anchor_id: str, limit: int = COMPARE_CANDIDATE_LIMIT) -> list[dict]:
        query = Query().where("id", "neq", anchor_id).take(limit)
        return self.gateway.fetch(ProductKind.parse(kind).table, query)

    def search(self, kind, term: str, exclude_id: str | None = None,
               limit: int = SEARCH_RESULT_LIMIT) -> list[dict]:
        term = (term or "").strip()
        if not term:
            return []
        query = Query().where("name", "ilike", f"%{term}%").take(limit)
        if exclude_id:
            query = query.where("id", "neq", exclude_id)
        return self.gateway.fetch(ProductKind.parse(kind).table, query)
