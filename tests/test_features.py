"""Tests for the feature extractor and the catalog statistics snapshot."""

import pytest

from bookreco.domain.models.stats import CatalogStats, CategoryPriceStats
from bookreco.domain.services.constants import CATEGORY_SET
from bookreco.domain.services.features import extract_features, price_score, price_tier
from bookreco.domain.services.stats_svc import build_catalog_stats

from conftest import make_item


@pytest.fixture
def stats():
    items = [
        make_item("a", "Fiction", 10, 5),
        make_item("b", "Fiction", 30, 10),
        make_item("c", "History", 20, 0),
    ]
    return build_catalog_stats(items, {"a": 3, "b": 6})


def test_build_catalog_stats_aggregates(stats):
    fiction = stats.category_stats["Fiction"]
    assert fiction.max_price == 30
    assert fiction.avg_price == 20
    assert fiction.count == 2
    assert stats.max_stock == 10
    assert stats.max_popularity == 6
    assert stats.global_avg_price == pytest.approx(20.0)
    assert stats.total_items == 3


def test_build_catalog_stats_empty():
    empty = build_catalog_stats([], {})
    assert empty.global_avg_price is None
    assert empty.max_popularity == 0
    assert empty.category_stats == {}


def test_feature_vector_layout(stats):
    vec = extract_features(make_item("a", "Fiction", 10, 5), stats)

    assert len(vec) == 1 + len(CATEGORY_SET) + 3
    assert vec[0] == pytest.approx(10 / 30)
    flags = vec[1:1 + len(CATEGORY_SET)]
    assert flags[CATEGORY_SET.index("Fiction")] == 1.0
    assert sum(flags) == 1.0
    assert vec[-3] == pytest.approx(0.5)   # popularity 3 / 6
    assert vec[-2] == pytest.approx(0.5)   # stock 5 / 10
    assert vec[-1] == 1.0                  # 10 < 0.7 * 20


def test_unknown_category_is_its_own_maximum(stats):
    item = make_item("x", "Poetry", 99, 1)
    assert price_score(item, stats) == 1.0
    flags = extract_features(item, stats)[1:1 + len(CATEGORY_SET)]
    assert flags == [0.0] * len(CATEGORY_SET)


def test_missing_popularity_scores_zero(stats):
    vec = extract_features(make_item("c", "History", 20, 0), stats)
    assert vec[-3] == 0.0


@pytest.mark.parametrize(
    "price,expected",
    [(5, 1.0), (13.99, 1.0), (14.5, 0.5), (25, 0.5), (30, 0.0), (500, 0.0)],
)
def test_price_tiers(price, expected):
    stats = CatalogStats(global_avg_price=20.0)
    assert price_tier(make_item("p", None, price, 0), stats) == expected


def test_price_tier_defaults_without_average():
    stats = CatalogStats()
    assert price_tier(make_item("p", None, 10, 0), stats) == 1.0    # default average 20
    assert price_tier(make_item("p", None, 40, 0), stats) == 0.0


@pytest.mark.parametrize(
    "item",
    [
        make_item("z", "Fiction", 0, 0),
        make_item("big", "Fiction", 10_000, 10_000),
        make_item("none", None, 3.5, 7),
        make_item("pop", "Children", 12, 2),
    ],
)
def test_all_coordinates_within_unit_interval(item):
    # snapshot built from a different catalog: values can exceed its maxima
    stats = CatalogStats(
        category_stats={"Fiction": CategoryPriceStats(avg_price=10, max_price=20, count=2)},
        popularity={"pop": 500.0},
        max_popularity=50.0,
        max_stock=5,
        global_avg_price=15.0,
    )
    vec = extract_features(item, stats)
    assert len(vec) == 1 + len(CATEGORY_SET) + 3
    assert all(0.0 <= v <= 1.0 for v in vec)
