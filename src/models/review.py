"""Review and rating models for products and articles."""
import uuid
from datetime import datetime

from sqlalchemy import Integer, Float, Text, DateTime, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.models.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class ExpertReview(Base):
    __tablename__ = "expert_reviews"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_new_id)
    # One review per product is a query convention, not a constraint
    product_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    author: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    pros: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    cons: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    verdict: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ProductRating(Base):
    __tablename__ = "product_ratings"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_product_ratings_range"),
    )

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_new_id)
    product_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ProductReview(Base):
    __tablename__ = "product_reviews"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_new_id)
    product_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review_text: Mapped[str] = mapped_column(Text, nullable=False)
    user_name: Mapped[str] = mapped_column(Text, nullable=False, default="Anonymous")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ArticleRating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_ratings_range"),
    )

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=_new_id)
    blog_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
