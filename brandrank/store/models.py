"""Records returned by the data-store read interface."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class BrandRecord:
    id: str
    name: str
    slug: str
    followers_count: int
    status: str
    created_at: datetime | None = None
    logo_url: str | None = None
    tagline: str | None = None


@dataclass(slots=True, frozen=True)
class ReviewRecord:
    rating: int
    created_at: datetime


@dataclass(slots=True, frozen=True)
class SaleRecord:
    id: str
    brand_id: str
    product_id: str | None
    amount: float
    currency: str
    sale_date: datetime
    referral: bool = False


@dataclass(slots=True, frozen=True)
class ProductRecord:
    id: str
    name: str
    is_published: bool


@dataclass(slots=True, frozen=True)
class ProductEvent:
    product_id: str | None
    occurred_at: datetime


@dataclass(slots=True, frozen=True)
class ProductLike:
    product_id: str
