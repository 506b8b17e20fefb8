"""Services package."""
from src.services.errors import GatewayError, NotFoundError, ValidationError, CapacityExceededError
from src.services.gateway import Filter, Query, DataGateway, SqlGateway, RestGateway, get_gateway
from src.services.pagination import PageAccumulator, VisibilityWindow, collection_accumulator
from src.services.listing_filter import filter_articles, filter_products, sort_products, home_sections
from src.services.comparison import ComparisonSelector, build_comparison_table
from src.services.ratings import RatingForm, RatingService, RatingStats, compute_rating_stats
from src.services.articles import ArticleService
from src.services.catalog import CatalogService
from src.services.blog_admin import BlogAdmin, validate_blog
from src.services.product_admin import ProductAdmin, ImageUpload, SaveOutcome, validate_product
from src.services.expert_reviews import ExpertReviewService, validate_expert_review
from src.services.image_store import LocalImageStore, RemoteImageStore, download_image, get_image_store, upload_image

__all__ = [
    "GatewayError",
    "NotFoundError",
    "ValidationError",
    "CapacityExceededError",
    "Filter",
    "Query",
    "DataGateway",
    "SqlGateway",
    "RestGateway",
    "get_gateway",
    "PageAccumulator",
    "VisibilityWindow",
    "collection_accumulator",
    "filter_articles",
    "filter_products",
    "sort_products",
    "home_sections",
    "ComparisonSelector",
    "build_comparison_table",
    "RatingForm",
    "RatingService",
    "RatingStats",
    "compute_rating_stats",
    "ArticleService",
    "CatalogService",
    "BlogAdmin",
    "validate_blog",
    "ProductAdmin",
    "ImageUpload",
    "SaveOutcome",
    "validate_product",
    "ExpertReviewService",
    "validate_expert_review",
    "LocalImageStore",
    "RemoteImageStore",
    "download_image",
    "get_image_store",
    "upload_image",
]
