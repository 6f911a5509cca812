"""Print the trending carousel and the leaderboard for the configured store."""

from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import load_dotenv

from brandrank.logic.ranking import RankingUnavailable, RankMode, rank_brands
from brandrank.store import create_store_from_env


async def main() -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    store = create_store_from_env()
    try:
        trending = await rank_brands(store, RankMode.TRENDING)
        leaderboard = await rank_brands(store, RankMode.LEADERBOARD)
    except RankingUnavailable as exc:
        print(f"Rankings unavailable: {exc}", file=sys.stderr)
        sys.exit(2)
    finally:
        close = getattr(store, "close", None)
        if close:
            await close()

    print("Trending")
    for entry in trending:
        print(f"  {entry.rank:>2}. {entry.brand.name:<24} {entry.score:>8.0f}")
    print("Leaderboard (last 30 days)")
    if not leaderboard:
        print("  no data")
    for entry in leaderboard:
        r = entry.ranking
        print(
            f"  {entry.rank:>2}. {entry.brand.name:<24} {r.score:>6.1f}"
            f"  rating {r.avg_rating:.1f} ({r.review_count} reviews, {r.sales_count} sales)"
        )


if __name__ == "__main__":
    asyncio.run(main())
