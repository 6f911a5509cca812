"""Read interface the ranking core consumes."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from brandrank.store.models import (
    BrandRecord,
    ProductEvent,
    ProductLike,
    ProductRecord,
    ReviewRecord,
    SaleRecord,
)


class DataStoreError(RuntimeError):
    """A read against the backing store failed."""


class BrandStore(Protocol):
    async def list_approved_brands(self) -> list[BrandRecord]:
        ...

    async def count_published_products(self, brand_id: str) -> int:
        ...

    async def count_recent_sales(self, brand_id: str, since: datetime | None) -> int:
        ...

    async def list_recent_reviews(self, brand_id: str, since: datetime | None) -> list[ReviewRecord]:
        ...

    async def get_brand(self, brand_id: str) -> BrandRecord | None:
        ...

    async def list_sales(self, brand_id: str, since: datetime | None) -> list[SaleRecord]:
        ...

    async def list_products(self, brand_id: str) -> list[ProductRecord]:
        ...

    async def list_product_views(self, brand_id: str, since: datetime | None) -> list[ProductEvent]:
        ...

    async def list_product_clicks(self, brand_id: str, since: datetime | None) -> list[ProductEvent]:
        ...

    async def list_product_likes(self, brand_id: str) -> list[ProductLike]:
        ...
