import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine

from brandrank.db.schema import brand_reviews, brands, external_sales, metadata, product_clicks, product_likes, product_views, products
from brandrank.store.base import DataStoreError
from brandrank.store.models import BrandRecord, ReviewRecord

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def make_brand(brand_id, followers=0, status="APPROVED", name=None, created_at=NOW - timedelta(days=60)):
    return BrandRecord(
        id=brand_id,
        name=name or brand_id.title(),
        slug=brand_id,
        followers_count=followers,
        status=status,
        created_at=created_at,
    )


class FakeStore:
    """In-memory store; ``failures`` holds ``(method, brand_id)`` pairs that raise."""

    def __init__(self, brands=(), products=None, sales=None, reviews=None, failures=(), slow=(), brands_error=None):
        self.brands = list(brands)
        self.products = products or {}
        self.sales = sales or {}
        self.reviews = reviews or {}
        self.failures = set(failures)
        self.slow = set(slow)
        self.brands_error = brands_error
        self.calls = []

    async def _maybe_fail(self, method, brand_id):
        self.calls.append((method, brand_id))
        if (method, brand_id) in self.slow:
            await asyncio.sleep(10)
        if (method, brand_id) in self.failures:
            raise DataStoreError(f"{method} failed for {brand_id}")

    async def list_approved_brands(self):
        if self.brands_error:
            raise self.brands_error
        return list(self.brands)

    async def count_published_products(self, brand_id):
        await self._maybe_fail("count_published_products", brand_id)
        return self.products.get(brand_id, 0)

    async def count_recent_sales(self, brand_id, since):
        await self._maybe_fail("count_recent_sales", brand_id)
        return self.sales.get(brand_id, 0)

    async def list_recent_reviews(self, brand_id, since):
        await self._maybe_fail("list_recent_reviews", brand_id)
        return [ReviewRecord(rating=r, created_at=NOW) for r in self.reviews.get(brand_id, [])]


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'marketplace.db'}", future=True)
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def seeded_engine(engine):
    with engine.begin() as conn:
        conn.execute(brands.insert(), [
            {"id": "nord", "name": "Atelier Nord", "slug": "atelier-nord", "followers_count": 100, "status": "APPROVED", "created_at": NOW - timedelta(days=200)},
            {"id": "terra", "name": "Terra Vasi", "slug": "terra-vasi", "followers_count": 40, "status": "APPROVED", "created_at": NOW - timedelta(days=100)},
            {"id": "lumen", "name": "Lumen Lab", "slug": "lumen-lab", "followers_count": 500, "status": "PENDING", "created_at": NOW - timedelta(days=10)},
        ])
        conn.execute(products.insert(), [
            {"id": "n1", "brand_id": "nord", "name": "Merino Scarf", "is_published": True},
            {"id": "n2", "brand_id": "nord", "name": "Ribbed Beanie", "is_published": True},
            {"id": "n3", "brand_id": "nord", "name": "Draft", "is_published": False},
            {"id": "t1", "brand_id": "terra", "name": "Serving Bowl", "is_published": True},
        ])
        conn.execute(external_sales.insert(), [
            {"id": "s1", "brand_id": "nord", "product_id": "n1", "external_order_id": "o1", "amount": 40, "currency": "EUR", "sale_date": NOW - timedelta(days=30), "viskory_referral": True},
            {"id": "s2", "brand_id": "nord", "product_id": "n1", "external_order_id": "o2", "amount": 40, "currency": "EUR", "sale_date": NOW - timedelta(days=31), "viskory_referral": False},
            {"id": "s3", "brand_id": "nord", "product_id": "n2", "external_order_id": "o3", "amount": 25.5, "currency": "EUR", "sale_date": NOW - timedelta(days=2), "viskory_referral": False},
            {"id": "s4", "brand_id": "terra", "product_id": "t1", "external_order_id": "o4", "amount": 60, "currency": "EUR", "sale_date": NOW - timedelta(days=1), "viskory_referral": False},
        ])
        conn.execute(brand_reviews.insert(), [
            {"brand_id": "nord", "rating": 5, "created_at": NOW - timedelta(days=3)},
            {"brand_id": "nord", "rating": 4, "created_at": NOW - timedelta(days=5)},
            {"brand_id": "nord", "rating": 1, "created_at": NOW - timedelta(days=45)},
            {"brand_id": "terra", "rating": 3, "created_at": NOW - timedelta(days=1)},
        ])
        conn.execute(product_views.insert(), [
            {"brand_id": "nord", "product_id": "n1", "viewed_at": NOW - timedelta(days=2)},
            {"brand_id": "nord", "product_id": "n1", "viewed_at": NOW - timedelta(days=2)},
            {"brand_id": "nord", "product_id": "n2", "viewed_at": NOW - timedelta(days=1)},
            {"brand_id": "nord", "product_id": "n1", "viewed_at": NOW - timedelta(days=40)},
        ])
        conn.execute(product_clicks.insert(), [
            {"brand_id": "nord", "product_id": "n1", "clicked_at": NOW - timedelta(days=2)},
            {"brand_id": "nord", "product_id": "n2", "clicked_at": NOW - timedelta(days=1)},
        ])
        conn.execute(product_likes.insert(), [
            {"brand_id": "nord", "product_id": "n2"},
            {"brand_id": "nord", "product_id": "n2"},
            {"brand_id": "nord", "product_id": "n1"},
        ])
    return engine
