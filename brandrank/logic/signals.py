"""Signal collection for brand ranking.

For each candidate brand three independent lookups are issued against the
store: published product count, sales inside the window and reviews inside
the window. All lookups for a batch run concurrently and are joined before
anything is scored. A lookup that fails or times out only zeroes its own
counter; siblings and other brands are unaffected.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Sequence

from brandrank.store.base import BrandStore
from brandrank.store.models import BrandRecord
from brandrank.utils.dates import now_utc, window_start

logger = logging.getLogger(__name__)

LOOKUP_TIMEOUT = float(os.environ.get("LOOKUP_TIMEOUT_SECONDS", 5.0))
WINDOW_DAYS = int(os.environ.get("RANKING_WINDOW_DAYS", 30))


@dataclass(slots=True, frozen=True)
class SignalBundle:
    brand: BrandRecord
    published_product_count: int = 0
    recent_sale_count: int = 0
    review_ratings: tuple[int, ...] = ()


async def collect_signals(
    store: BrandStore,
    brands: Sequence[BrandRecord],
    *,
    window_days: int = WINDOW_DAYS,
    now: datetime | None = None,
    timeout: float | None = LOOKUP_TIMEOUT,
) -> list[SignalBundle]:
    """Gather one ``SignalBundle`` per brand, preserving input order.

    ``window_days=0`` reads sales and reviews for all time.
    """
    since = window_start(now or now_utc(), window_days)
    return list(
        await asyncio.gather(*(_collect_brand(store, brand, since, timeout) for brand in brands))
    )


async def _collect_brand(
    store: BrandStore,
    brand: BrandRecord,
    since: datetime | None,
    timeout: float | None,
) -> SignalBundle:
    products, sales, reviews = await asyncio.gather(
        lookup_or_default(brand.id, "published products", store.count_published_products(brand.id), 0, timeout),
        lookup_or_default(brand.id, "recent sales", store.count_recent_sales(brand.id, since), 0, timeout),
        lookup_or_default(brand.id, "recent reviews", store.list_recent_reviews(brand.id, since), [], timeout),
    )
    ratings = tuple(review.rating for review in reviews)
    for label, value in (("followers", brand.followers_count), ("published products", products), ("recent sales", sales)):
        if value < 0:
            logger.warning("Negative %s count %s for brand %s", label, value, brand.id)
    return SignalBundle(
        brand=brand,
        published_product_count=products,
        recent_sale_count=sales,
        review_ratings=ratings,
    )


async def lookup_or_default(
    brand_id: str,
    label: str,
    call: Awaitable[Any],
    default: Any,
    timeout: float | None,
) -> Any:
    try:
        return await asyncio.wait_for(call, timeout)
    except asyncio.TimeoutError:
        logger.warning("Timed out reading %s for brand %s; using %r", label, brand_id, default)
    except Exception as exc:
        logger.warning("Failed reading %s for brand %s: %s; using %r", label, brand_id, exc, default)
    return default
