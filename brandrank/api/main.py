"""FastAPI application serving brand rankings and brand analytics."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel

from brandrank.logic.analytics import TIME_RANGES, BrandNotFound, compute_brand_analytics
from brandrank.logic.ranking import DEFAULT_LIMITS, RankedBrand, RankingUnavailable, RankMode, rank_brands
from brandrank.store import BrandStore, DataStoreError, create_store_from_env

logger = logging.getLogger(__name__)

app = FastAPI(title="Brand Rankings API")

MAX_LIMIT = 100


class BrandSummary(BaseModel):
    id: str
    name: str
    slug: str
    logo_url: str | None = None
    tagline: str | None = None
    followers_count: int


class TrendingEntry(BaseModel):
    rank: int
    brand: BrandSummary
    trending_score: int
    product_count: int
    recent_orders: int


class LeaderboardEntry(BaseModel):
    rank: int
    brand: BrandSummary
    score: float
    avg_rating: float
    reviews_count: int
    sales_count: int
    rating_score: float
    sales_score: float
    reviews_score: float


class ProductStatsModel(BaseModel):
    product_id: str
    name: str
    views: int
    clicks: int
    sales: int
    revenue: float
    likes: int
    conversion: float


class BrandAnalyticsResponse(BaseModel):
    brand_id: str
    time_range: str
    total_views: int
    total_clicks: int
    total_followers: int
    total_sales: int
    total_revenue: float
    conversion_rate: float
    click_through_rate: float
    top_products: list[ProductStatsModel]
    most_liked_products: list[ProductStatsModel]
    views_over_time: list[dict[str, object]]
    sales_over_time: list[dict[str, object]]
    referral_split: list[dict[str, object]]


_store: BrandStore | None = None


def get_store() -> BrandStore:
    global _store
    if _store is None:
        _store = create_store_from_env()
    return _store


def _summary(entry: RankedBrand) -> BrandSummary:
    brand = entry.brand
    return BrandSummary(
        id=brand.id,
        name=brand.name,
        slug=brand.slug,
        logo_url=brand.logo_url,
        tagline=brand.tagline,
        followers_count=brand.followers_count,
    )


async def _ranked(store: BrandStore, mode: RankMode, limit: int) -> list[RankedBrand]:
    try:
        return await rank_brands(store, mode, limit)
    except RankingUnavailable as exc:
        raise HTTPException(status_code=503, detail="Rankings are temporarily unavailable") from exc


@app.get("/rankings/trending", response_model=list[TrendingEntry])
async def trending(
    limit: int = Query(DEFAULT_LIMITS[RankMode.TRENDING], ge=0, le=MAX_LIMIT),
    store: BrandStore = Depends(get_store),
) -> list[TrendingEntry]:
    ranked = await _ranked(store, RankMode.TRENDING, limit)
    return [
        TrendingEntry(
            rank=entry.rank,
            brand=_summary(entry),
            trending_score=entry.trending.trending_score,
            product_count=entry.trending.product_count,
            recent_orders=entry.trending.recent_orders,
        )
        for entry in ranked
    ]


@app.get("/rankings/leaderboard", response_model=list[LeaderboardEntry])
async def leaderboard(
    limit: int = Query(DEFAULT_LIMITS[RankMode.LEADERBOARD], ge=0, le=MAX_LIMIT),
    store: BrandStore = Depends(get_store),
) -> list[LeaderboardEntry]:
    ranked = await _ranked(store, RankMode.LEADERBOARD, limit)
    return [
        LeaderboardEntry(
            rank=entry.rank,
            brand=_summary(entry),
            score=entry.ranking.score,
            avg_rating=entry.ranking.avg_rating,
            reviews_count=entry.ranking.review_count,
            sales_count=entry.ranking.sales_count,
            rating_score=entry.ranking.rating_score,
            sales_score=entry.ranking.sales_score,
            reviews_score=entry.ranking.reviews_score,
        )
        for entry in ranked
    ]


@app.get("/brands/{brand_id}/analytics", response_model=BrandAnalyticsResponse)
async def brand_analytics(
    brand_id: str,
    time_range: str = Query("30d", alias="range"),
    store: BrandStore = Depends(get_store),
) -> BrandAnalyticsResponse:
    if time_range not in TIME_RANGES:
        raise HTTPException(status_code=400, detail="Invalid range")
    try:
        analytics = await compute_brand_analytics(store, brand_id, time_range)
    except BrandNotFound as exc:
        raise HTTPException(status_code=404, detail="Brand not found") from exc
    except DataStoreError as exc:
        logger.error("Analytics for %s failed: %s", brand_id, exc)
        raise HTTPException(status_code=503, detail="Analytics are temporarily unavailable") from exc

    def products(items) -> list[ProductStatsModel]:
        return [ProductStatsModel(**asdict(item), conversion=item.conversion) for item in items]

    return BrandAnalyticsResponse(
        brand_id=analytics.brand_id,
        time_range=analytics.time_range,
        total_views=analytics.total_views,
        total_clicks=analytics.total_clicks,
        total_followers=analytics.total_followers,
        total_sales=analytics.total_sales,
        total_revenue=analytics.total_revenue,
        conversion_rate=analytics.conversion_rate,
        click_through_rate=analytics.click_through_rate,
        top_products=products(analytics.top_products),
        most_liked_products=products(analytics.most_liked_products),
        views_over_time=[asdict(day) for day in analytics.views_over_time],
        sales_over_time=[asdict(day) for day in analytics.sales_over_time],
        referral_split=[asdict(item) for item in analytics.referral_split],
    )
