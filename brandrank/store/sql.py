"""SQLAlchemy-backed implementation of the brand read interface."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from brandrank.db.schema import (
    APPROVED,
    brand_reviews,
    brands,
    external_sales,
    product_clicks,
    product_likes,
    product_views,
    products,
)
from brandrank.store.base import DataStoreError
from brandrank.store.models import (
    BrandRecord,
    ProductEvent,
    ProductLike,
    ProductRecord,
    ReviewRecord,
    SaleRecord,
)

logger = logging.getLogger(__name__)


class SqlBrandStore:
    """Reads brand signals with SQLAlchemy Core.

    Queries are blocking, so each one runs in the loop's default executor.
    Concurrent lookups therefore need an engine whose pool hands out one
    connection per thread (any file or server database does).
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    async def close(self) -> None:
        self.engine.dispose()

    async def list_approved_brands(self) -> list[BrandRecord]:
        query = (
            select(brands)
            .where(brands.c.status == APPROVED)
            .order_by(brands.c.followers_count.desc(), brands.c.created_at.desc())
        )
        rows = await self._run(self._fetch_all, query)
        try:
            return [_brand_from_row(row) for row in rows]
        except (KeyError, TypeError, ValueError) as exc:
            raise DataStoreError(f"Malformed brand row: {exc!r}") from exc

    async def get_brand(self, brand_id: str) -> BrandRecord | None:
        query = select(brands).where(brands.c.id == brand_id)
        rows = await self._run(self._fetch_all, query)
        return _brand_from_row(rows[0]) if rows else None

    async def count_published_products(self, brand_id: str) -> int:
        query = (
            select(func.count())
            .select_from(products)
            .where(products.c.brand_id == brand_id, products.c.is_published.is_(True))
        )
        return await self._run(self._scalar, query)

    async def count_recent_sales(self, brand_id: str, since: datetime | None) -> int:
        query = select(func.count()).select_from(external_sales).where(external_sales.c.brand_id == brand_id)
        if since is not None:
            query = query.where(external_sales.c.sale_date >= since)
        return await self._run(self._scalar, query)

    async def list_recent_reviews(self, brand_id: str, since: datetime | None) -> list[ReviewRecord]:
        query = select(brand_reviews.c.rating, brand_reviews.c.created_at).where(brand_reviews.c.brand_id == brand_id)
        if since is not None:
            query = query.where(brand_reviews.c.created_at >= since)
        rows = await self._run(self._fetch_all, query)
        return [ReviewRecord(rating=int(row["rating"]), created_at=row["created_at"]) for row in rows]

    async def list_sales(self, brand_id: str, since: datetime | None) -> list[SaleRecord]:
        query = select(external_sales).where(external_sales.c.brand_id == brand_id)
        if since is not None:
            query = query.where(external_sales.c.sale_date >= since)
        rows = await self._run(self._fetch_all, query.order_by(external_sales.c.sale_date))
        return [
            SaleRecord(
                id=row["id"],
                brand_id=row["brand_id"],
                product_id=row["product_id"],
                amount=float(row["amount"]),
                currency=row["currency"],
                sale_date=row["sale_date"],
                referral=bool(row["viskory_referral"]),
            )
            for row in rows
        ]

    async def list_products(self, brand_id: str) -> list[ProductRecord]:
        query = select(products).where(products.c.brand_id == brand_id).order_by(products.c.id)
        rows = await self._run(self._fetch_all, query)
        return [
            ProductRecord(id=row["id"], name=row["name"], is_published=bool(row["is_published"]))
            for row in rows
        ]

    async def list_product_views(self, brand_id: str, since: datetime | None) -> list[ProductEvent]:
        query = select(product_views.c.product_id, product_views.c.viewed_at).where(product_views.c.brand_id == brand_id)
        if since is not None:
            query = query.where(product_views.c.viewed_at >= since)
        rows = await self._run(self._fetch_all, query)
        return [ProductEvent(product_id=row["product_id"], occurred_at=row["viewed_at"]) for row in rows]

    async def list_product_clicks(self, brand_id: str, since: datetime | None) -> list[ProductEvent]:
        query = select(product_clicks.c.product_id, product_clicks.c.clicked_at).where(product_clicks.c.brand_id == brand_id)
        if since is not None:
            query = query.where(product_clicks.c.clicked_at >= since)
        rows = await self._run(self._fetch_all, query)
        return [ProductEvent(product_id=row["product_id"], occurred_at=row["clicked_at"]) for row in rows]

    async def list_product_likes(self, brand_id: str) -> list[ProductLike]:
        query = select(product_likes.c.product_id).where(product_likes.c.brand_id == brand_id)
        rows = await self._run(self._fetch_all, query)
        return [ProductLike(product_id=row["product_id"]) for row in rows]

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, fn, *args)
        except SQLAlchemyError as exc:
            logger.debug("Query failed: %s", exc)
            raise DataStoreError(str(exc)) from exc

    def _fetch_all(self, query) -> list[dict[str, Any]]:
        with self.engine.connect() as conn:
            return [dict(row) for row in conn.execute(query).mappings()]

    def _scalar(self, query) -> int:
        with self.engine.connect() as conn:
            return int(conn.execute(query).scalar_one())


def _brand_from_row(row: dict[str, Any]) -> BrandRecord:
    return BrandRecord(
        id=row["id"],
        name=row["name"],
        slug=row["slug"],
        followers_count=int(row["followers_count"] or 0),
        status=row["status"],
        created_at=row["created_at"],
        logo_url=row["logo_url"],
        tagline=row["tagline"],
    )
