"""Table metadata for the marketplace tables the ranking core reads."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, MetaData, Numeric, String, Table, Text

metadata = MetaData()

APPROVED = "APPROVED"

brands = Table(
    "brands",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", Text, nullable=False),
    Column("slug", Text, nullable=False, unique=True),
    Column("logo_url", Text),
    Column("tagline", Text),
    Column("followers_count", Integer, nullable=False, default=0),
    Column("status", Text, nullable=False, default="PENDING"),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

products = Table(
    "products",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("brand_id", String(64), ForeignKey("brands.id"), nullable=False),
    Column("name", Text, nullable=False),
    Column("is_published", Boolean, nullable=False, default=False),
)

external_sales = Table(
    "external_sales",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("brand_id", String(64), ForeignKey("brands.id"), nullable=False),
    Column("product_id", String(64), ForeignKey("products.id")),
    Column("external_order_id", Text, nullable=False),
    Column("amount", Numeric(12, 2), nullable=False),
    Column("currency", Text, nullable=False, default="EUR"),
    Column("sale_date", DateTime(timezone=True), nullable=False),
    Column("viskory_referral", Boolean, nullable=False, default=False),
)

brand_reviews = Table(
    "brand_reviews",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("brand_id", String(64), ForeignKey("brands.id"), nullable=False),
    Column("rating", Integer, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

product_views = Table(
    "product_views",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("brand_id", String(64), ForeignKey("brands.id"), nullable=False),
    Column("product_id", String(64), ForeignKey("products.id")),
    Column("viewed_at", DateTime(timezone=True), nullable=False),
)

product_clicks = Table(
    "product_clicks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("brand_id", String(64), ForeignKey("brands.id"), nullable=False),
    Column("product_id", String(64), ForeignKey("products.id")),
    Column("clicked_at", DateTime(timezone=True), nullable=False),
)

product_likes = Table(
    "product_likes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("brand_id", String(64), ForeignKey("brands.id"), nullable=False),
    Column("product_id", String(64), ForeignKey("products.id"), nullable=False),
)
