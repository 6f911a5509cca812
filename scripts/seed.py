"""Seed a database with demo brands, products, reviews and sales."""

from __future__ import annotations

from datetime import timedelta

from dotenv import load_dotenv
from sqlalchemy.engine import Engine

from brandrank.db.schema import brand_reviews, brands, external_sales, metadata, products
from brandrank.db.session import create_engine_from_env
from brandrank.store import load_seed_brands
from brandrank.utils.dates import now_utc


def seed(engine: Engine) -> int:
    now = now_utc()
    metadata.create_all(engine)
    seeded = load_seed_brands()
    with engine.begin() as conn:
        for idx, brand in enumerate(seeded):
            conn.execute(
                brands.insert(),
                {
                    "id": brand["id"],
                    "name": brand["name"],
                    "slug": brand["slug"],
                    "tagline": brand.get("tagline"),
                    "followers_count": brand.get("followers_count", 0),
                    "status": brand.get("status", "PENDING"),
                    "created_at": now - timedelta(days=90 - idx),
                },
            )
            for product in brand.get("products") or []:
                conn.execute(products.insert(), {**product, "brand_id": brand["id"]})
            for offset, rating in enumerate(brand.get("reviews") or []):
                conn.execute(
                    brand_reviews.insert(),
                    {"brand_id": brand["id"], "rating": rating, "created_at": now - timedelta(days=offset + 1)},
                )
            for n in range(brand.get("sales") or 0):
                conn.execute(
                    external_sales.insert(),
                    {
                        "id": f"{brand['id']}-sale-{n}",
                        "brand_id": brand["id"],
                        "external_order_id": f"{brand['slug']}-{n}",
                        "amount": 25 + n,
                        "currency": "EUR",
                        "sale_date": now - timedelta(days=n % 28),
                        "viskory_referral": n % 3 == 0,
                    },
                )
    return len(seeded)


def main() -> None:
    load_dotenv()
    count = seed(create_engine_from_env())
    print(f"Seeded {count} brands")


if __name__ == "__main__":
    main()
