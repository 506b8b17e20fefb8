"""Side-by-side product comparison."""
import logging
from dataclasses import dataclass

from config import CURRENCY_SYMBOL, MAX_COMPARE, NOT_AVAILABLE
from src.models.product import ProductKind
from src.services.errors import CapacityExceededError

logger = logging.getLogger(__name__)

BASE_SPECS = [
    ("Price", "price"),
    ("Brand", "brand"),
    ("Model", "model_name"),
    ("Display", "display_specs"),
    ("Processor", "processor"),
    ("RAM", "ram"),
    ("Storage", "storage"),
    ("Battery", "battery"),
    ("OS", "os"),
    ("Color", "color"),
]

KIND_SPECS = {
    ProductKind.MOBILE: [("Camera", "camera"), ("Chipset", "chipset")],
    ProductKind.LAPTOP: [("Graphics", "graphics"), ("Ports", "ports")],
}


def spec_fields(kind) -> list[tuple[str, str]]:
    """(label, field) pairs compared for a product kind."""
    return BASE_SPECS + KIND_SPECS[ProductKind.parse(kind)]


def format_price(value) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    amount = float(value)
    if amount.is_integer():
        return f"{CURRENCY_SYMBOL}{int(amount):,}"
    return f"{CURRENCY_SYMBOL}{amount:,.2f}"


def format_spec(field_name: str, value) -> str:
    if field_name == "price":
        return format_price(value)
    if value is None or (isinstance(value, str) and not value.strip()):
        return NOT_AVAILABLE
    return str(value)


class ComparisonSelector:
    """Ordered selection anchored on one product, bounded at ``capacity``.

    The anchor sits at index 0 and cannot be removed.
    """

    def __init__(self, anchor: dict, capacity: int = MAX_COMPARE):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._products: list[dict] = [anchor]

    @property
    def anchor(self) -> dict:
        return self._products[0]

    @property
    def products(self) -> list[dict]:
        return list(self._products)

    @property
    def candidates(self) -> list[dict]:
        """Selected products other than the anchor."""
        return self._products[1:]

    @property
    def is_full(self) -> bool:
        return len(self._products) >= self.capacity

    @property
    def can_compare(self) -> bool:
        return len(self._products) > 1

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id) -> bool:
        return any(p.get("id") == product_id for p in self._products)

    def add(self, product: dict) -> bool:
        """Add *product*.

        Returns False (no change) when it is already selected. Raises
        CapacityExceededError, leaving the selection unchanged, when full.
        """
        if product.get("id") in self:
            logger.debug("Product %s already selected for comparison", product.get("id"))
            return False
        if self.is_full:
            raise CapacityExceededError(
                f"You can compare up to {self.capacity} products at a time",
                limit=self.capacity,
            )
        self._products.append(product)
        return True

    def remove(self, product_id) -> bool:
        """Remove a selected product. Removing the anchor is a no-op."""
        if product_id == self.anchor.get("id"):
            return False
        before = len(self._products)
        self._products = [p for p in self._products if p.get("id") != product_id]
        return len(self._products) < before


@dataclass
class ComparisonRow:
    label: str
    field: str
    values: list[str]


@dataclass
class ComparisonTable:
    products: list[dict]
    rows: list[ComparisonRow]

    @property
    def headers(self) -> list[str]:
        """Spec label column followed by one column per product."""
        return ["Specification"] + [p.get("name") or NOT_AVAILABLE for p in self.products]

    @staticmethod
    def column_key(index: int) -> str:
        return f"p{index}"

    def columns(self) -> list[dict]:
        """Table widget columns, keyed by position so same-named variants stay apart."""
        cols = [{"name": "label", "label": "Specification", "field": "label", "align": "left"}]
        for i, header in enumerate(self.headers[1:]):
            key = self.column_key(i)
            cols.append({"name": key, "label": header, "field": key, "align": "left"})
        return cols

    def as_records(self) -> list[dict]:
        """One record per row with ``label`` and a ``p<i>`` value per product."""
        records = []
        for row in self.rows:
            record = {"label": row.label}
            record.update({self.column_key(i): value for i, value in enumerate(row.values)})
            records.append(record)
        return records


def build_comparison_table(products: list[dict], kind) -> ComparisonTable:
    """Row-major table over the fixed spec list; every row has one value per product."""
    rows = [
        ComparisonRow(label, field_name, [format_spec(field_name, p.get(field_name)) for p in products])
        for label, field_name in spec_fields(kind)
    ]
    return ComparisonTable(products=list(products), rows=rows)
