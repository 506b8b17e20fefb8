"""Product models -- mobile phones and laptops."""
import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Float, Text, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from src.models.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class ProductKind(str, Enum):
    MOBILE = "mobile"
    LAPTOP = "laptop"

    @property
    def table(self) -> str:
        return PRODUCT_TABLES[self]

    @property
    def label(self) -> str:
        return "Mobile phone" if self is ProductKind.MOBILE else "Laptop"

    @classmethod
    def parse(cls, value) -> "ProductKind":
        if isinstance(value, cls):
            return value
        return cls(str(value or "mobile").strip().lower())


PRODUCT_TABLES = {
    ProductKind.MOBILE: "mobile_products",
    ProductKind.LAPTOP: "laptops",
}


class ProductColumns:
    """Columns shared by every product table."""

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    brand: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    model_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    display_specs: Mapped[str] = mapped_column(Text, nullable=False)
    processor: Mapped[str] = mapped_column(Text, nullable=False)
    ram: Mapped[str] = mapped_column(Text, nullable=False)
    storage: Mapped[str] = mapped_column(Text, nullable=False)
    battery: Mapped[str] = mapped_column(Text, nullable=False)
    os: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    gallery_images: Mapped[list | None] = mapped_column(JSON, nullable=True)
    multimedia_specs: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    design_specs: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    performance_specs: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    display_details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class MobileProduct(ProductColumns, Base):
    __tablename__ = "mobile_products"

    camera: Mapped[str] = mapped_column(Text, nullable=False)
    chipset: Mapped[str | None] = mapped_column(Text, nullable=True)
    charging_specs: Mapped[str | None] = mapped_column(Text, nullable=True)
    screen_size: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolution: Mapped[str | None] = mapped_column(Text, nullable=True)
    camera_details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    sensor_specs: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    network_specs: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    general_specs: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<MobileProduct id={self.id} name={self.name!r}>"


class Laptop(ProductColumns, Base):
    __tablename__ = "laptops"

    graphics: Mapped[str | None] = mapped_column(Text, nullable=True)
    ports: Mapped[str | None] = mapped_column(Text, nullable=True)
    connectivity_specs: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<Laptop id={self.id} name={self.name!r}>"
