"""Supabase (PostgREST) implementation of the brand read interface."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx

from brandrank.db.schema import APPROVED
from brandrank.store.base import DataStoreError
from brandrank.store.models import (
    BrandRecord,
    ProductEvent,
    ProductLike,
    ProductRecord,
    ReviewRecord,
    SaleRecord,
)
from brandrank.utils.dates import parse_timestamp
from brandrank.utils.retry import retry_async


class SupabaseClient:
    def __init__(self, url: str, key: str, *, session: httpx.AsyncClient | None = None) -> None:
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.session = session or httpx.AsyncClient(timeout=15.0)
        self.headers = {"apikey": key, "Authorization": f"Bearer {key}"}

    async def close(self) -> None:
        await self.session.aclose()

    async def select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        try:
            response = await retry_async(self.session.get)(
                f"{self.base_url}/{table}", params=params, headers=self.headers
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DataStoreError(f"select on {table} failed: {exc}") from exc
        try:
            data = response.json()
        except ValueError as exc:
            raise DataStoreError(f"select on {table} returned a non-JSON body") from exc
        if not isinstance(data, list):
            raise DataStoreError(f"select on {table} returned {type(data).__name__}, expected a list")
        return data

    async def count(self, table: str, params: dict[str, str]) -> int:
        headers = {**self.headers, "Prefer": "count=exact"}
        try:
            response = await retry_async(self.session.head)(
                f"{self.base_url}/{table}", params=params, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DataStoreError(f"count on {table} failed: {exc}") from exc
        return parse_content_range(response.headers.get("Content-Range"))


def parse_content_range(value: str | None) -> int:
    """Total from a PostgREST ``Content-Range`` header such as ``0-9/42``."""
    if not value or "/" not in value:
        raise DataStoreError(f"Missing count in Content-Range: {value!r}")
    total = value.rsplit("/", 1)[1]
    if total == "*":
        raise DataStoreError("Server did not report an exact count")
    return int(total)


def _eq(value: object) -> str:
    return f"eq.{value}"


def _since(params: dict[str, str], column: str, since: datetime | None) -> dict[str, str]:
    if since is not None:
        params[column] = f"gte.{since.isoformat()}"
    return params


class SupabaseBrandStore:
    def __init__(self, client: SupabaseClient) -> None:
        self.client = client

    async def close(self) -> None:
        await self.client.close()

    async def list_approved_brands(self) -> list[BrandRecord]:
        rows = await self.client.select(
            "brands",
            {
                "select": "*",
                "status": _eq(APPROVED),
                "order": "followers_count.desc,created_at.desc",
            },
        )
        try:
            return [_brand_from_json(row) for row in rows]
        except (KeyError, TypeError, ValueError) as exc:
            raise DataStoreError(f"Malformed brand row: {exc!r}") from exc

    async def get_brand(self, brand_id: str) -> BrandRecord | None:
        rows = await self.client.select("brands", {"select": "*", "id": _eq(brand_id)})
        return _brand_from_json(rows[0]) if rows else None

    async def count_published_products(self, brand_id: str) -> int:
        return await self.client.count(
            "products", {"select": "id", "brand_id": _eq(brand_id), "is_published": "eq.true"}
        )

    async def count_recent_sales(self, brand_id: str, since: datetime | None) -> int:
        params = _since({"select": "id", "brand_id": _eq(brand_id)}, "sale_date", since)
        return await self.client.count("external_sales", params)

    async def list_recent_reviews(self, brand_id: str, since: datetime | None) -> list[ReviewRecord]:
        params = _since({"select": "rating,created_at", "brand_id": _eq(brand_id)}, "created_at", since)
        rows = await self.client.select("brand_reviews", params)
        return [
            ReviewRecord(rating=int(row["rating"]), created_at=parse_timestamp(row["created_at"]))
            for row in rows
        ]

    async def list_sales(self, brand_id: str, since: datetime | None) -> list[SaleRecord]:
        params = _since({"select": "*", "brand_id": _eq(brand_id), "order": "sale_date.asc"}, "sale_date", since)
        rows = await self.client.select("external_sales", params)
        return [
            SaleRecord(
                id=str(row["id"]),
                brand_id=str(row["brand_id"]),
                product_id=row.get("product_id"),
                amount=float(row["amount"]),
                currency=row.get("currency") or "EUR",
                sale_date=parse_timestamp(row["sale_date"]),
                referral=bool(row.get("viskory_referral", False)),
            )
            for row in rows
        ]

    async def list_products(self, brand_id: str) -> list[ProductRecord]:
        rows = await self.client.select(
            "products", {"select": "id,name,is_published", "brand_id": _eq(brand_id), "order": "id.asc"}
        )
        return [
            ProductRecord(id=str(row["id"]), name=row["name"], is_published=bool(row.get("is_published")))
            for row in rows
        ]

    async def list_product_views(self, brand_id: str, since: datetime | None) -> list[ProductEvent]:
        params = _since({"select": "product_id,viewed_at", "brand_id": _eq(brand_id)}, "viewed_at", since)
        rows = await self.client.select("product_views", params)
        return [
            ProductEvent(product_id=row.get("product_id"), occurred_at=parse_timestamp(row["viewed_at"]))
            for row in rows
        ]

    async def list_product_clicks(self, brand_id: str, since: datetime | None) -> list[ProductEvent]:
        params = _since({"select": "product_id,clicked_at", "brand_id": _eq(brand_id)}, "clicked_at", since)
        rows = await self.client.select("product_clicks", params)
        return [
            ProductEvent(product_id=row.get("product_id"), occurred_at=parse_timestamp(row["clicked_at"]))
            for row in rows
        ]

    async def list_product_likes(self, brand_id: str) -> list[ProductLike]:
        rows = await self.client.select("product_likes", {"select": "product_id", "brand_id": _eq(brand_id)})
        return [ProductLike(product_id=str(row["product_id"])) for row in rows]


def _brand_from_json(row: dict[str, Any]) -> BrandRecord:
    created_at = row.get("created_at")
    return BrandRecord(
        id=str(row["id"]),
        name=row["name"],
        slug=row["slug"],
        followers_count=int(row.get("followers_count") or 0),
        status=row.get("status", APPROVED),
        created_at=parse_timestamp(created_at) if created_at else None,
        logo_url=row.get("logo_url"),
        tagline=row.get("tagline"),
    )
