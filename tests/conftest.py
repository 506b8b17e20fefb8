"""Shared fixtures: an in-memory store behind a real SqlGateway."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.models.database import init_db
from src.services.gateway import SqlGateway

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def gateway(engine):
    return SqlGateway(sessionmaker(bind=engine))


def minutes_ago(n: int) -> datetime:
    """Timestamps that sort newest-first by ascending *n*."""
    return BASE_TIME - timedelta(minutes=n)


def blog_payload(n: int, **overrides) -> dict:
    payload = {
        "slug": f"post-{n}",
        "title": f"Post {n}",
        "content": f"Body of post {n}",
        "author": "Editor",
        "category": "TECH",
        "subcategory": "News",
        "created_at": minutes_ago(n),
    }
    payload.update(overrides)
    return payload


def mobile_payload(n: int, **overrides) -> dict:
    payload = {
        "name": f"Phone {n}",
        "brand": "Acme",
        "price": 10000 + n * 1000,
        "display_specs": "6.1 inch OLED",
        "processor": "Octa-core",
        "ram": "8GB",
        "storage": "128GB",
        "battery": "4500mAh",
        "camera": "50MP",
        "created_at": minutes_ago(n),
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_blogs(gateway):
    def _make(count: int, **overrides) -> list[dict]:
        return [gateway.insert("blogs", blog_payload(n, **overrides)) for n in range(count)]
    return _make


@pytest.fixture
def make_mobiles(gateway):
    def _make(count: int, **overrides) -> list[dict]:
        return [gateway.insert("mobile_products", mobile_payload(n, **overrides)) for n in range(count)]
    return _make
