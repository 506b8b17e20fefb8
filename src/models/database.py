"""Database engine, session factory, and base model."""
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from config import DATABASE_URL

logger = logging.getLogger(__name__)

engine = create_engine(DATABASE_URL, echo=False)
SessionLocal = sessionmaker(bind=engine)


class Base(DeclarativeBase):

    def to_dict(self) -> dict:
        """Return the row as a plain record keyed by column name."""
        return {col.name: getattr(self, col.key) for col in self.__table__.columns}


def init_db(bind=None):
    """Create all tables defined by Base subclasses."""
    # Import all models so they register with Base.metadata
    import src.models.blog  # noqa: F401
    import src.models.product  # noqa: F401
    import src.models.review  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ready")
