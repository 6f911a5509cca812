import logging
from datetime import timedelta

import pytest

from brandrank.logic.signals import SignalBundle, collect_signals
from brandrank.store.sql import SqlBrandStore
from brandrank.utils.dates import window_start
from conftest import NOW, FakeStore, make_brand


@pytest.mark.asyncio
async def test_collect_signals_bundles_each_brand_in_order():
    brands = [make_brand("a", followers=3), make_brand("b")]
    store = FakeStore(brands=brands, products={"a": 2}, sales={"b": 4}, reviews={"a": [5, 3]})
    bundles = await collect_signals(store, brands, now=NOW)
    assert bundles == [
        SignalBundle(brand=brands[0], published_product_count=2, recent_sale_count=0, review_ratings=(5, 3)),
        SignalBundle(brand=brands[1], published_product_count=0, recent_sale_count=4, review_ratings=()),
    ]


@pytest.mark.asyncio
async def test_failed_lookup_defaults_only_that_counter(caplog):
    brands = [make_brand("a"), make_brand("b")]
    store = FakeStore(
        brands=brands,
        products={"a": 2, "b": 7},
        sales={"a": 3, "b": 1},
        reviews={"a": [4], "b": [2]},
        failures={("count_recent_sales", "a"), ("list_recent_reviews", "b")},
    )
    with caplog.at_level(logging.WARNING):
        bundles = await collect_signals(store, brands, now=NOW)
    a, b = bundles
    assert (a.published_product_count, a.recent_sale_count, a.review_ratings) == (2, 0, (4,))
    assert (b.published_product_count, b.recent_sale_count, b.review_ratings) == (7, 1, ())
    assert "recent sales" in caplog.text


@pytest.mark.asyncio
async def test_slow_lookup_times_out_to_zero():
    brands = [make_brand("a")]
    store = FakeStore(brands=brands, products={"a": 9}, sales={"a": 3}, slow={("count_published_products", "a")})
    (bundle,) = await collect_signals(store, brands, now=NOW, timeout=0.05)
    assert bundle.published_product_count == 0
    assert bundle.recent_sale_count == 3


@pytest.mark.asyncio
async def test_negative_counts_pass_through_with_warning(caplog):
    brands = [make_brand("a")]
    store = FakeStore(brands=brands, sales={"a": -2})
    with caplog.at_level(logging.WARNING):
        (bundle,) = await collect_signals(store, brands, now=NOW)
    assert bundle.recent_sale_count == -2
    assert "Negative recent sales" in caplog.text


def test_window_start():
    assert window_start(NOW, 30) == NOW - timedelta(days=30)
    assert window_start(NOW, 0) is None


@pytest.mark.asyncio
async def test_window_boundary_against_sql_store(seeded_engine):
    store = SqlBrandStore(seeded_engine)
    brands = await store.list_approved_brands()
    bundles = {b.brand.id: b for b in await collect_signals(store, brands, window_days=30, now=NOW)}
    # sale at exactly now - 30 days counts, now - 31 days does not
    assert bundles["nord"].recent_sale_count == 2
    assert bundles["nord"].published_product_count == 2
    assert sorted(bundles["nord"].review_ratings) == [4, 5]


@pytest.mark.asyncio
async def test_zero_window_reads_all_time(seeded_engine):
    store = SqlBrandStore(seeded_engine)
    brands = await store.list_approved_brands()
    bundles = {b.brand.id: b for b in await collect_signals(store, brands, window_days=0, now=NOW)}
    assert bundles["nord"].recent_sale_count == 3
    assert sorted(bundles["nord"].review_ratings) == [1, 4, 5]
