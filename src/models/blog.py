"""Blog (article) model."""
import uuid
from datetime import datetime

from sqlalchemy import Integer, Text, DateTime, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from src.models.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Blog(Base):
    __tablename__ = "blogs"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_new_id)
    slug: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    author: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    subcategory: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    featured: Mapped[bool] = mapped_column(Boolean, default=False)
    featured_in_category: Mapped[bool] = mapped_column(Boolean, default=False)
    popular: Mapped[bool] = mapped_column(Boolean, default=False)
    popular_in_games: Mapped[bool] = mapped_column(Boolean, default=False)
    popular_in_tech: Mapped[bool] = mapped_column(Boolean, default=False)
    popular_in_entertainment: Mapped[bool] = mapped_column(Boolean, default=False)
    popular_in_gadgets: Mapped[bool] = mapped_column(Boolean, default=False)
    popular_in_stocks: Mapped[bool] = mapped_column(Boolean, default=False)

    view_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<Blog id={self.id} slug={self.slug!r}>"
