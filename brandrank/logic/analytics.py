"""Per-brand dashboard analytics."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

import pandas as pd

from brandrank.logic.signals import LOOKUP_TIMEOUT, lookup_or_default
from brandrank.store.base import BrandStore, DataStoreError
from brandrank.store.models import ProductEvent, ProductLike, ProductRecord, SaleRecord
from brandrank.utils.dates import day_key, now_utc, window_start

TIME_RANGES = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
}
TOP_PRODUCTS = 5


class BrandNotFound(RuntimeError):
    pass


@dataclass(slots=True)
class ProductStats:
    product_id: str
    name: str
    views: int = 0
    clicks: int = 0
    sales: int = 0
    revenue: float = 0.0
    likes: int = 0

    @property
    def conversion(self) -> float:
        return _percentage(self.sales, self.clicks)


@dataclass(slots=True)
class DailyTraffic:
    date: str
    views: int
    clicks: int


@dataclass(slots=True)
class DailySales:
    date: str
    sales: int
    revenue: float


@dataclass(slots=True)
class ReferralSlice:
    name: str
    value: int


@dataclass(slots=True)
class BrandAnalytics:
    brand_id: str
    time_range: str
    total_views: int
    total_clicks: int
    total_followers: int
    total_sales: int
    total_revenue: float
    conversion_rate: float
    click_through_rate: float
    top_products: list[ProductStats] = field(default_factory=list)
    most_liked_products: list[ProductStats] = field(default_factory=list)
    views_over_time: list[DailyTraffic] = field(default_factory=list)
    sales_over_time: list[DailySales] = field(default_factory=list)
    referral_split: list[ReferralSlice] = field(default_factory=list)


async def compute_brand_analytics(
    store: BrandStore,
    brand_id: str,
    time_range: str = "30d",
    *,
    now: datetime | None = None,
    timeout: float | None = LOOKUP_TIMEOUT,
) -> BrandAnalytics:
    if time_range not in TIME_RANGES:
        raise ValueError(f"Unknown time range {time_range!r}; expected one of {sorted(TIME_RANGES)}")
    try:
        brand = await asyncio.wait_for(store.get_brand(brand_id), timeout)
    except asyncio.TimeoutError as exc:
        raise DataStoreError(f"Timed out loading brand {brand_id}") from exc
    if brand is None:
        raise BrandNotFound(brand_id)
    since = window_start(now or now_utc(), TIME_RANGES[time_range])

    views, clicks, sales, products, likes = await asyncio.gather(
        lookup_or_default(brand_id, "product views", store.list_product_views(brand_id, since), [], timeout),
        lookup_or_default(brand_id, "product clicks", store.list_product_clicks(brand_id, since), [], timeout),
        lookup_or_default(brand_id, "sales", store.list_sales(brand_id, since), [], timeout),
        lookup_or_default(brand_id, "products", store.list_products(brand_id), [], timeout),
        lookup_or_default(brand_id, "product likes", store.list_product_likes(brand_id), [], timeout),
    )

    stats = product_stats(products, views, clicks, sales, likes)
    top_products = sorted(stats, key=lambda s: s.views, reverse=True)[:TOP_PRODUCTS]
    liked = sorted(stats, key=lambda s: s.likes, reverse=True)
    most_liked = [s for s in liked if s.likes > 0][:TOP_PRODUCTS]

    return BrandAnalytics(
        brand_id=brand_id,
        time_range=time_range,
        total_views=len(views),
        total_clicks=len(clicks),
        total_followers=brand.followers_count or 0,
        total_sales=len(sales),
        total_revenue=sum(sale.amount for sale in sales),
        conversion_rate=_percentage(len(sales), len(clicks)),
        click_through_rate=_percentage(len(clicks), len(views)),
        top_products=top_products,
        most_liked_products=most_liked,
        views_over_time=traffic_over_time(views, clicks),
        sales_over_time=sales_over_time(sales),
        referral_split=referral_split(sales),
    )


def product_stats(
    products: Sequence[ProductRecord],
    views: Sequence[ProductEvent],
    clicks: Sequence[ProductEvent],
    sales: Sequence[SaleRecord],
    likes: Sequence[ProductLike],
) -> list[ProductStats]:
    """Per-product counters; events for products not owned by the brand are ignored."""
    stats = {product.id: ProductStats(product_id=product.id, name=product.name) for product in products}
    for view in views:
        if view.product_id in stats:
            stats[view.product_id].views += 1
    for click in clicks:
        if click.product_id in stats:
            stats[click.product_id].clicks += 1
    for like in likes:
        if like.product_id in stats:
            stats[like.product_id].likes += 1
    for sale in sales:
        if sale.product_id in stats:
            stats[sale.product_id].sales += 1
            stats[sale.product_id].revenue += sale.amount
    return list(stats.values())


def traffic_over_time(views: Sequence[ProductEvent], clicks: Sequence[ProductEvent]) -> list[DailyTraffic]:
    records = [{"date": day_key(e.occurred_at), "views": 1, "clicks": 0} for e in views]
    records += [{"date": day_key(e.occurred_at), "views": 0, "clicks": 1} for e in clicks]
    if not records:
        return []
    frame = pd.DataFrame(records).groupby("date", as_index=False).sum().sort_values("date")
    return [
        DailyTraffic(date=row.date, views=int(row.views), clicks=int(row.clicks))
        for row in frame.itertuples(index=False)
    ]


def sales_over_time(sales: Sequence[SaleRecord]) -> list[DailySales]:
    if not sales:
        return []
    frame = pd.DataFrame(
        [{"date": day_key(s.sale_date), "sales": 1, "revenue": s.amount} for s in sales]
    )
    grouped = frame.groupby("date", as_index=False).agg(sales=("sales", "sum"), revenue=("revenue", "sum"))
    grouped = grouped.sort_values("date")
    return [
        DailySales(date=row.date, sales=int(row.sales), revenue=round(float(row.revenue), 2))
        for row in grouped.itertuples(index=False)
    ]


def referral_split(sales: Sequence[SaleRecord]) -> list[ReferralSlice]:
    referred = sum(1 for sale in sales if sale.referral)
    slices = [
        ReferralSlice(name="referral", value=referred),
        ReferralSlice(name="direct", value=len(sales) - referred),
    ]
    return [s for s in slices if s.value > 0]


def _percentage(numerator: int, denominator: int) -> float:
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100
