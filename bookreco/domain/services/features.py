from typing import List

from bookreco.domain.models.product import CatalogItem
from bookreco.domain.models.stats import CatalogStats
from bookreco.domain.services.constants import (
    BUDGET_RATIO,
    CATEGORY_SET,
    DEFAULT_GLOBAL_AVG_PRICE,
    MID_RANGE_RATIO,
    TIER_BUDGET,
    TIER_MID_RANGE,
    TIER_PREMIUM,
)


def _clamp(x: float) -> float:
    return min(max(x, 0.0), 1.0)


def _ratio(value: float, maximum: float) -> float:
    """value / maximum clamped to [0, 1]; a zero maximum divides by 1."""
    return _clamp(value / (maximum or 1))


def price_score(item: CatalogItem, stats: CatalogStats) -> float:
    cat = stats.category_stats.get(item.category) if item.category else None
    # unknown category: the item is its own maximum
    max_price = cat.max_price if cat else item.price
    return _ratio(item.price, max_price)


def category_flags(item: CatalogItem) -> List[float]:
    return [1.0 if item.category == name else 0.0 for name in CATEGORY_SET]


def popularity_score(item: CatalogItem, stats: CatalogStats) -> float:
    return _ratio(stats.popularity.get(item.product_id, 0.0), stats.max_popularity)


def stock_score(item: CatalogItem, stats: CatalogStats) -> float:
    return _ratio(item.stock, stats.max_stock)


def price_tier(item: CatalogItem, stats: CatalogStats) -> float:
    """Budget 1.0, mid-range 0.5, premium 0.0."""
    avg = stats.global_avg_price or DEFAULT_GLOBAL_AVG_PRICE
    if item.price < avg * BUDGET_RATIO:
        return TIER_BUDGET
    if item.price < avg * MID_RANGE_RATIO:
        return TIER_MID_RANGE
    return TIER_PREMIUM


def extract_features(item: CatalogItem, stats: CatalogStats) -> List[float]:
    """
    Feature vector used for clustering, every coordinate in [0, 1]:
      [price_score, *category_flags, popularity_score, stock_score, price_tier]
    """
    return [
        price_score(item, stats),
        *category_flags(item),
        popularity_score(item, stats),
        stock_score(item, stats),
        price_tier(item, stats),
    ]
