import asyncio
from datetime import datetime, timezone

import pytest

from brandrank.logic.analytics import BrandNotFound, compute_brand_analytics, referral_split, sales_over_time, traffic_over_time
from brandrank.store.base import DataStoreError
from brandrank.store.models import ProductEvent, SaleRecord
from brandrank.store.sql import SqlBrandStore
from conftest import NOW


@pytest.mark.asyncio
async def test_brand_analytics_30d(seeded_engine):
    analytics = await compute_brand_analytics(SqlBrandStore(seeded_engine), "nord", "30d", now=NOW)
    assert analytics.total_views == 3
    assert analytics.total_clicks == 2
    assert analytics.total_sales == 2
    assert analytics.total_revenue == pytest.approx(65.5)
    assert analytics.total_followers == 100
    assert analytics.conversion_rate == pytest.approx(100.0)
    assert analytics.click_through_rate == pytest.approx(200 / 3)
    assert [p.product_id for p in analytics.top_products] == ["n1", "n2", "n3"]
    assert analytics.top_products[0].conversion == pytest.approx(100.0)
    assert [(p.product_id, p.likes) for p in analytics.most_liked_products] == [("n2", 2), ("n1", 1)]
    assert [(d.date, d.views, d.clicks) for d in analytics.views_over_time] == [
        ("2026-09-29", 2, 1),
        ("2026-09-30", 1, 1),
    ]
    assert [(d.date, d.sales, d.revenue) for d in analytics.sales_over_time] == [
        ("2026-09-01", 1, 40.0),
        ("2026-09-29", 1, 25.5),
    ]
    assert [(s.name, s.value) for s in analytics.referral_split] == [("referral", 1), ("direct", 1)]


@pytest.mark.asyncio
async def test_brand_analytics_7d_narrows_window(seeded_engine):
    analytics = await compute_brand_analytics(SqlBrandStore(seeded_engine), "nord", "7d", now=NOW)
    assert analytics.total_sales == 1
    assert [(s.name, s.value) for s in analytics.referral_split] == [("direct", 1)]


@pytest.mark.asyncio
async def test_brand_analytics_errors(seeded_engine):
    store = SqlBrandStore(seeded_engine)
    with pytest.raises(BrandNotFound):
        await compute_brand_analytics(store, "missing", now=NOW)
    with pytest.raises(ValueError):
        await compute_brand_analytics(store, "nord", "1y", now=NOW)


def test_time_series_group_by_utc_day():
    late = datetime(2026, 9, 30, 23, 30, tzinfo=timezone.utc)
    views = [ProductEvent("p", late), ProductEvent("p", late)]
    assert [(d.date, d.views, d.clicks) for d in traffic_over_time(views, [])] == [("2026-09-30", 2, 0)]
    assert traffic_over_time([], []) == []
    sales = [
        SaleRecord("1", "b", None, 10.0, "EUR", late),
        SaleRecord("2", "b", None, 5.25, "EUR", late, referral=True),
    ]
    assert [(d.sales, d.revenue) for d in sales_over_time(sales)] == [(2, 15.25)]
    assert [(s.name, s.value) for s in referral_split(sales)] == [("referral", 1), ("direct", 1)]
    assert referral_split([]) == []


class SlowBrandStore:
    def __init__(self):
        self.calls = []

    async def get_brand(self, brand_id):
        self.calls.append(brand_id)
        await asyncio.sleep(10)


@pytest.mark.asyncio
async def test_brand_lookup_timeout_is_a_store_error():
    store = SlowBrandStore()
    with pytest.raises(DataStoreError):
        await compute_brand_analytics(store, "nord", now=NOW, timeout=0.05)
    assert store.calls == ["nord"]
