"""Ranking of approved brands for the homepage carousel and the leaderboard."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Sequence

from brandrank.db.schema import APPROVED
from brandrank.logic.scoring import RankingScore, TrendingScore, ranking_score, trending_score
from brandrank.logic.signals import LOOKUP_TIMEOUT, WINDOW_DAYS, SignalBundle, collect_signals
from brandrank.store.base import BrandStore, DataStoreError
from brandrank.store.models import BrandRecord

logger = logging.getLogger(__name__)


class RankMode(str, Enum):
    TRENDING = "trending"
    LEADERBOARD = "leaderboard"


DEFAULT_LIMITS = {
    RankMode.TRENDING: int(os.environ.get("TRENDING_LIMIT", 6)),
    RankMode.LEADERBOARD: int(os.environ.get("LEADERBOARD_LIMIT", 20)),
}


class RankingUnavailable(RuntimeError):
    """The approved brand list could not be loaded."""


@dataclass(slots=True, frozen=True)
class RankedBrand:
    rank: int
    brand: BrandRecord
    score: float
    trending: TrendingScore | None = None
    ranking: RankingScore | None = None


def rank_trending(bundles: Sequence[SignalBundle], limit: int = DEFAULT_LIMITS[RankMode.TRENDING]) -> list[RankedBrand]:
    scored = [(bundle, trending_score(bundle)) for bundle in _approved(bundles)]
    ordered = sorted(scored, key=lambda item: item[1].trending_score, reverse=True)
    return [
        RankedBrand(rank=rank, brand=bundle.brand, score=float(result.trending_score), trending=result)
        for rank, (bundle, result) in enumerate(ordered[:_check_limit(limit)], start=1)
    ]


def rank_leaderboard(bundles: Sequence[SignalBundle], limit: int = DEFAULT_LIMITS[RankMode.LEADERBOARD]) -> list[RankedBrand]:
    scored = [(bundle, ranking_score(bundle)) for bundle in _approved(bundles)]
    positive = [item for item in scored if item[1].score > 0]
    ordered = sorted(positive, key=lambda item: item[1].score, reverse=True)
    return [
        RankedBrand(rank=rank, brand=bundle.brand, score=result.score, ranking=result)
        for rank, (bundle, result) in enumerate(ordered[:_check_limit(limit)], start=1)
    ]


def rank_bundles(mode: RankMode | str, bundles: Sequence[SignalBundle], limit: int | None = None) -> list[RankedBrand]:
    mode = RankMode(mode)
    size = DEFAULT_LIMITS[mode] if limit is None else limit
    if mode is RankMode.TRENDING:
        return rank_trending(bundles, size)
    return rank_leaderboard(bundles, size)


async def rank_brands(
    store: BrandStore,
    mode: RankMode | str = RankMode.TRENDING,
    limit: int | None = None,
    *,
    now: datetime | None = None,
    timeout: float | None = LOOKUP_TIMEOUT,
) -> list[RankedBrand]:
    """Recompute the ranking for ``mode`` from fresh store reads.

    Raises ``RankingUnavailable`` only when the brand list itself cannot be
    read; an empty list means there is nothing to rank.
    """
    mode = RankMode(mode)
    try:
        brands = await asyncio.wait_for(store.list_approved_brands(), timeout)
    except (DataStoreError, asyncio.TimeoutError) as exc:
        logger.error("Unable to load approved brands for %s ranking: %s", mode.value, exc)
        raise RankingUnavailable("Approved brands could not be loaded") from exc
    candidates = [brand for brand in brands if brand.status == APPROVED]
    if not candidates:
        return []
    if mode is RankMode.LEADERBOARD:
        # Tied leaderboard scores list the newest brand first.
        candidates = newest_first(candidates)
    bundles = await collect_signals(store, candidates, window_days=WINDOW_DAYS, now=now, timeout=timeout)
    ranked = rank_bundles(mode, bundles, limit)
    logger.info("Ranked %s of %s brands in %s mode", len(ranked), len(candidates), mode.value)
    return ranked


def newest_first(brands: Sequence[BrandRecord]) -> list[BrandRecord]:
    """Stable sort by ``created_at`` descending; brands without a date go last."""
    return sorted(brands, key=lambda b: (b.created_at is not None, b.created_at), reverse=True)


def _approved(bundles: Sequence[SignalBundle]) -> list[SignalBundle]:
    return [bundle for bundle in bundles if bundle.brand.status == APPROVED]


def _check_limit(limit: int) -> int:
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")
    return limit
