"""Score formulas for the homepage carousel and the public leaderboard.

The two formulas were tuned independently and weight signals differently:
the trending score has no review term and the ranking score has no
follower term. Both are user visible, so they are kept separate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from brandrank.logic.signals import SignalBundle

TRENDING_WEIGHTS = {
    "followers": 2,
    "products": 10,
    "orders": 5,
}

RATING_WEIGHT = 20
SALES_WEIGHT = 2
SALES_CAP = 40
REVIEWS_WEIGHT = 2
REVIEWS_CAP = 20


@dataclass(slots=True, frozen=True)
class TrendingScore:
    brand_id: str
    trending_score: int
    product_count: int
    recent_orders: int


@dataclass(slots=True, frozen=True)
class RankingScore:
    brand_id: str
    score: float
    rating_score: float
    sales_score: float
    reviews_score: float
    avg_rating: float
    review_count: int
    sales_count: int


def round1(value: float) -> float:
    """Round half up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def average_rating(ratings: Sequence[int]) -> float:
    if not ratings:
        return 0.0
    return float(np.mean(np.array(ratings, dtype=float)))


def trending_score(bundle: SignalBundle) -> TrendingScore:
    score = (
        bundle.brand.followers_count * TRENDING_WEIGHTS["followers"]
        + bundle.published_product_count * TRENDING_WEIGHTS["products"]
        + bundle.recent_sale_count * TRENDING_WEIGHTS["orders"]
    )
    return TrendingScore(
        brand_id=bundle.brand.id,
        trending_score=score,
        product_count=bundle.published_product_count,
        recent_orders=bundle.recent_sale_count,
    )


def ranking_score(bundle: SignalBundle) -> RankingScore:
    review_count = len(bundle.review_ratings)
    avg = average_rating(bundle.review_ratings)
    rating_score = avg * RATING_WEIGHT
    sales_score = min(bundle.recent_sale_count * SALES_WEIGHT, SALES_CAP)
    reviews_score = min(review_count * REVIEWS_WEIGHT, REVIEWS_CAP)
    return RankingScore(
        brand_id=bundle.brand.id,
        score=round1(rating_score + sales_score + reviews_score),
        rating_score=rating_score,
        sales_score=float(sales_score),
        reviews_score=float(reviews_score),
        avg_rating=round1(avg),
        review_count=review_count,
        sales_count=bundle.recent_sale_count,
    )
