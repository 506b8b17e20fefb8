"""Database models package."""
from src.models.database import Base, engine, SessionLocal, init_db
from src.models.category import Category, HOME, ALL_SUBCATEGORIES
from src.models.blog import Blog
from src.models.product import MobileProduct, Laptop, ProductKind, PRODUCT_TABLES
from src.models.review import ExpertReview, ProductRating, ProductReview, ArticleRating

# Collection name -> model, as addressed by the data gateway
COLLECTIONS = {
    "blogs": Blog,
    "mobile_products": MobileProduct,
    "laptops": Laptop,
    "expert_reviews": ExpertReview,
    "product_ratings": ProductRating,
    "product_reviews": ProductReview,
    "ratings": ArticleRating,
}

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "init_db",
    "Category",
    "HOME",
    "ALL_SUBCATEGORIES",
    "Blog",
    "MobileProduct",
    "Laptop",
    "ProductKind",
    "PRODUCT_TABLES",
    "ExpertReview",
    "ProductRating",
    "ProductReview",
    "ArticleRating",
    "COLLECTIONS",
]
