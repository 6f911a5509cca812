"""Data-store backends for brand ranking."""

from __future__ import annotations

import os
import pathlib

import yaml

from brandrank.store.base import BrandStore, DataStoreError

SEED_BRANDS_PATH = pathlib.Path(__file__).with_name("brands.yml")


def create_store_from_env() -> BrandStore:
    """Supabase when SUPABASE_URL and SUPABASE_KEY are set, else DATABASE_URL via SQLAlchemy."""
    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_KEY")
    if url and key:
        from brandrank.store.supabase import SupabaseBrandStore, SupabaseClient

        return SupabaseBrandStore(SupabaseClient(url, key))
    from brandrank.db.session import create_engine_from_env
    from brandrank.store.sql import SqlBrandStore

    return SqlBrandStore(create_engine_from_env())


def load_seed_brands(limit: int | None = None) -> list[dict[str, object]]:
    data = yaml.safe_load(SEED_BRANDS_PATH.read_text())
    brands = list(data or [])
    if limit:
        return brands[:limit]
    return brands


__all__ = ["BrandStore", "DataStoreError", "create_store_from_env", "load_seed_brands"]
